"""
cinescript.llm.enrich - AI suggestions for shot details.

Asks the LLM for lens, camera and composition choices that fit a shot
description, and merges validated suggestions into a shot.
"""

from __future__ import annotations

import logging
from typing import Any

from cinescript.exceptions import EnrichmentError, LLMError
from cinescript.llm.parsing import parse_llm_json, validate_suggestion_response
from cinescript.llm.templates import PromptTemplateManager, composition_options
from cinescript.models import Shot, ShotSuggestion

logger = logging.getLogger(__name__)

FALLBACK_DESCRIPTION = "A generic cinematic shot"


def shot_brief(shot: Shot) -> str:
    """Pick the text to describe a shot to the LLM."""
    return shot.description or shot.notes or FALLBACK_DESCRIPTION


def suggest_shot_details(
    client: Any,
    description: str,
    template_manager: PromptTemplateManager | None = None,
    console=None,
) -> ShotSuggestion:
    """Ask the LLM for technical and composition details for a shot.

    Args:
        client: LLMClient instance
        description: Shot description
        template_manager: Optional PromptTemplateManager (built-ins if None)
        console: Optional rich console for output

    Returns:
        Validated suggestion; fields outside the known domains are dropped

    Raises:
        EnrichmentError: If the LLM call fails or returns no usable JSON
    """
    template_manager = template_manager or PromptTemplateManager()
    prompt = template_manager.render(
        "suggest.txt",
        {"description": description, "composition": composition_options()},
    )

    if console:
        console.print(f"[dim]  Sending prompt ({len(prompt)} chars)...[/dim]")

    try:
        response = client.complete(prompt, max_tokens=1024, json_mode=True, console=console)
        data = parse_llm_json(response)
    except LLMError as e:
        raise EnrichmentError(f"Shot suggestion failed: {e}") from e

    suggestion = validate_suggestion_response(data)
    logger.debug("Suggested %s", suggestion.model_dump(exclude_none=True))
    return suggestion


def apply_suggestion(shot: Shot, suggestion: ShotSuggestion) -> Shot:
    """Return a copy of the shot with every suggested field filled in.

    The suggested lighting has no shot field and is not applied.
    """
    updates = suggestion.model_dump(exclude_none=True, exclude={"lighting"})
    if not updates:
        return shot
    return shot.model_copy(update=updates)


def refine_image_prompt(
    client: Any,
    description: str,
    template_manager: PromptTemplateManager | None = None,
    console=None,
) -> str:
    """Turn a (possibly Italian) shot description into an English image prompt.

    Raises:
        EnrichmentError: If the LLM call fails or returns nothing
    """
    template_manager = template_manager or PromptTemplateManager()
    prompt = template_manager.render("refine_prompt.txt", {"description": description})

    try:
        refined = client.complete(prompt, max_tokens=512, console=console).strip()
    except LLMError as e:
        raise EnrichmentError(f"Prompt refinement failed: {e}") from e

    if not refined:
        raise EnrichmentError("Could not refine prompt. Try again.")
    return refined


def default_image_prompt(shot: Shot) -> str:
    if not shot.description:
        return ""
    return f"Cinematic shot, {shot.description}"
