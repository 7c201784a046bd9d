"""
cinescript.llm.parsing - LLM output JSON parsing with validation.

Handles parsing LLM responses into structured JSON with error recovery,
and filters suggested shot details down to the closed enum domains.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from cinescript.exceptions import LLMResponseError
from cinescript.models import COMPOSITION_FIELDS, ShotSuggestion, parse_enum

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("lens", "camera", "aperture", "lighting")


def extract_json_from_response(response: str) -> str:
    """Extract a JSON object from an LLM response.

    Raises:
        LLMResponseError: If no JSON object is found
    """
    text = response.strip()

    # Remove markdown code blocks
    if "```" in text:
        text = re.sub(r"```json\s*", "", text)
        text = re.sub(r"```\s*", "", text)
        text = text.strip()

    json_match = re.search(r"\{[\s\S]*\}", text)
    if json_match:
        return json_match.group(0)

    raise LLMResponseError("No JSON object found in response")


def repair_json(text: str) -> str:
    """Attempt to repair common JSON issues (trailing commas, missing braces)."""
    text = re.sub(r",(\s*[}\]])", r"\1", text)

    open_braces = text.count("{")
    close_braces = text.count("}")
    open_brackets = text.count("[")
    close_brackets = text.count("]")

    if open_brackets > close_brackets:
        text += "]" * (open_brackets - close_brackets)
    if open_braces > close_braces:
        text += "}" * (open_braces - close_braces)

    return text


def parse_llm_json(response: str) -> dict[str, Any]:
    """Parse a JSON object from an LLM response with error recovery.

    Handles markdown code fences, trailing commas, missing closing braces
    and text before or after the object.

    Raises:
        LLMResponseError: If parsing fails
    """
    text = extract_json_from_response(response)

    for candidate in (text, repair_json(text)):
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    raise LLMResponseError(
        f"Failed to parse LLM response as JSON after repair attempts.\n\n"
        f"Response (first 500 chars):\n{text[:500]}"
    )


def validate_suggestion_response(data: dict[str, Any]) -> ShotSuggestion:
    """Keep only the usable fields of a shot suggestion.

    Text fields must be non-empty strings. Composition fields must name a
    value of their enum; anything else is dropped so the shot keeps its
    current value.
    """
    fields: dict[str, Any] = {}

    for name in TEXT_FIELDS:
        value = data.get(name)
        if isinstance(value, str) and value.strip():
            fields[name] = value.strip()

    for name, enum_cls in COMPOSITION_FIELDS.items():
        if name not in data:
            continue
        value = parse_enum(enum_cls, data[name])
        if value is None:
            logger.debug("Discarding suggested %s %r: not a known value", name, data[name])
            continue
        fields[name] = value

    return ShotSuggestion(**fields)
