"""
Instruction composition for the try-on request.

Builds the single instruction string sent with the two images. Templates are
loaded from prompts.yaml; this module only selects one and fills the
background slot. Pure string work: no I/O beyond the cached template load.
"""

from dataclasses import dataclass

from tryon.core.prompts_loader import (
    get_concise_template,
    get_default_background,
    get_detailed_background_texts,
    get_detailed_template,
)
from tryon.logging_config import get_logger, log_prompts

logger = get_logger(__name__)

PROMPT_TYPE_DETAILED = "detailed"
PROMPT_TYPE_CONCISE = "concise"


@dataclass(frozen=True)
class GenerationPreferences:
    """Optional caller preferences for one request."""

    background: str | None = None
    detailed: bool = True

    @property
    def prompt_type(self) -> str:
        return PROMPT_TYPE_DETAILED if self.detailed else PROMPT_TYPE_CONCISE


@dataclass(frozen=True)
class ComposedInstruction:
    """The instruction text and which template produced it."""

    text: str
    prompt_type: str


def preferences_from_form(
    background: str | None, use_detailed: str | None
) -> GenerationPreferences:
    """
    Map raw form values to GenerationPreferences.

    Only the exact string "false" selects the concise template; any other value,
    including absence, selects the detailed one. A blank background counts as
    no preference.
    """
    bg = background.strip() if background else ""
    return GenerationPreferences(
        background=bg or None,
        detailed=use_detailed != "false",
    )


def _fill(template: str, **slots: str) -> str:
    # str.format would choke on braces inside user-supplied background text
    for name, value in slots.items():
        template = template.replace("{" + name + "}", value)
    return template


def compose_instruction(preferences: GenerationPreferences) -> ComposedInstruction:
    """
    Build the instruction string for a request.

    Args:
        preferences: Background preference and template choice

    Returns:
        ComposedInstruction with the filled template

    Raises:
        ConfigurationError: If prompts.yaml is missing or invalid
    """
    background = preferences.background

    if preferences.detailed:
        preference_text, default_text = get_detailed_background_texts()
        if background:
            slot = _fill(preference_text, background=background)
        else:
            slot = _fill(default_text, background=get_default_background())
        text = _fill(get_detailed_template(), background_instruction=slot)
    else:
        text = _fill(get_concise_template(), background=background or get_default_background())

    text = text.strip()
    logger.debug(
        "Composed %s instruction chars=%d custom_background=%s",
        preferences.prompt_type,
        len(text),
        background is not None,
    )
    if log_prompts():
        logger.info("Prompt (used): %s", text)
    return ComposedInstruction(text=text, prompt_type=preferences.prompt_type)
