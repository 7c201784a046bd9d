"""
cinescript.llm.templates - Prompt template loading and rendering.

Uses Jinja2 to render the built-in prompts. A workspace can override any of
them by dropping a file with the same name into its prompts/ directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import ChoiceLoader, DictLoader, Environment, FileSystemLoader, Template

from cinescript.models import COMPOSITION_FIELDS

SUGGEST_TEMPLATE = """\
You are a professional Director of Photography.
Based on this shot description: "{{ description }}",
suggest a JSON object with the following keys:
- lens (string, e.g. "50mm")
- aperture (string, e.g. "T2.8")
- camera (string, generic pro camera)
- lighting (string)
{% for field, options in composition.items() -%}
- {{ field }} (one of: {{ options }})
{% endfor %}
Return ONLY valid JSON. Do not use markdown code blocks.
"""

REFINE_TEMPLATE = """\
Act as an expert prompt engineer for AI image generation.
Translate the following Italian shot description into a highly detailed, \
cinematic English prompt suitable for a photorealistic movie shot.

Italian Description: "{{ description }}"

Rules:
1. Translate accurately to English.
2. Enhance with cinematic keywords (e.g., "cinematic lighting", "photorealistic", "8k", "highly detailed").
3. Describe lighting, mood, and texture if implied.
4. Return ONLY the English prompt string, no other text.
"""

BUILTIN_TEMPLATES: dict[str, str] = {
    "suggest.txt": SUGGEST_TEMPLATE,
    "refine_prompt.txt": REFINE_TEMPLATE,
}


class PromptTemplateManager:
    """Manages loading and rendering of prompt templates."""

    def __init__(self, prompts_dir: Path | None = None) -> None:
        self.prompts_dir = prompts_dir
        loaders = []
        if prompts_dir is not None and prompts_dir.exists():
            loaders.append(FileSystemLoader(str(prompts_dir)))
        loaders.append(DictLoader(BUILTIN_TEMPLATES))
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=False,
            keep_trailing_newline=True,
        )
        self._cache: dict[str, Template] = {}

    def get_template(self, name: str) -> Template:
        """Load a template by name, preferring the workspace override.

        Raises:
            jinja2.TemplateNotFound: If no template has that name
        """
        if name not in self._cache:
            self._cache[name] = self.env.get_template(name)
        return self._cache[name]

    def render(self, template_name: str, variables: dict[str, Any]) -> str:
        return self.get_template(template_name).render(**variables)

    def list_templates(self) -> list[str]:
        return sorted(self.env.list_templates())


def format_enum_options(enum_cls: type) -> str:
    """Format an enum's labels as a quoted, comma-separated list."""
    return ", ".join(f'"{member.value}"' for member in enum_cls)


def composition_options() -> dict[str, str]:
    return {field: format_enum_options(enum_cls) for field, enum_cls in COMPOSITION_FIELDS.items()}
