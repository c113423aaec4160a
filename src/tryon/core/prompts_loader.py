"""
Load instruction templates from the bundled prompts.yaml file.

Prompts are defined in src/tryon/prompts.yaml and loaded once per process.
Use get_prompt() for raw access or the specific getters below.
"""

import importlib.resources
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from tryon.utils.exceptions import ConfigurationError

# Module-level cache for parsed prompts
_prompts_data: dict[str, Any] | None = None


class DetailedPrompt(BaseModel):
    """Schema for the detailed (verbose) template."""

    template: str = Field(..., min_length=1, description="Must contain {background_instruction}")
    background_preference: str = Field(
        ..., min_length=1, description="Slot text when a preference is given; uses {background}"
    )
    background_default: str = Field(
        ..., min_length=1, description="Slot text when no preference is given; uses {background}"
    )


class ConcisePrompt(BaseModel):
    """Schema for the concise template."""

    template: str = Field(..., min_length=1, description="Must contain {background}")


class TryOnPrompts(BaseModel):
    """Schema for the tryon section."""

    default_background: str = Field(..., min_length=1)
    detailed: DetailedPrompt
    concise: ConcisePrompt


class PromptsSchema(BaseModel):
    """Schema for prompts.yaml configuration file."""

    model_config = {"extra": "allow"}

    tryon: TryOnPrompts


def _load_prompts() -> dict[str, Any]:
    """Load and parse prompts.yaml from the package. Cached after first call.

    Returns:
        Dictionary of prompt data.

    Raises:
        ConfigurationError: If YAML is missing, malformed, or fails validation.
    """
    global _prompts_data
    if _prompts_data is not None:
        return _prompts_data

    try:
        with (
            importlib.resources.files("tryon").joinpath("prompts.yaml").open(encoding="utf-8") as f
        ):
            raw = f.read()
    except FileNotFoundError as e:
        raise ConfigurationError(
            "prompts.yaml not found. This file is required and should be bundled with the package."
        ) from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse prompts.yaml: {e}. Check YAML syntax and formatting."
        ) from e

    if data is None:
        raise ConfigurationError("prompts.yaml is empty. Expected a 'tryon' section.")

    try:
        PromptsSchema(**data)
    except ValidationError as e:
        errors = "\n".join(
            f"  - {'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(
            f"Invalid prompts.yaml structure:\n{errors}\n"
            "Expected 'tryon' section with 'detailed' and 'concise' templates."
        ) from e

    _prompts_data = data
    return _prompts_data


def get_prompt(key: str, *subkeys: str) -> str | None:
    """
    Get a prompt string from prompts.yaml.

    Args:
        key: Top-level key (e.g. "tryon").
        subkeys: Optional nested keys (e.g. "detailed", "template").

    Returns:
        The prompt string, or None if not found.
    """
    value: Any = _load_prompts().get(key)
    for subkey in subkeys:
        if not isinstance(value, dict):
            return None
        value = value.get(subkey)
    return value if isinstance(value, str) else None


def _require(placeholder: str, *path: str) -> str:
    template = get_prompt("tryon", *path)
    dotted = ".".join(("tryon", *path))
    if not template:
        raise ConfigurationError(f"{dotted} not found in prompts.yaml. This key is required.")
    if placeholder not in template:
        raise ConfigurationError(f"{dotted} must contain {placeholder} placeholder.")
    return template


def get_detailed_template() -> str:
    """Return the detailed template (contains {background_instruction})."""
    return _require("{background_instruction}", "detailed", "template")


def get_detailed_background_texts() -> tuple[str, str]:
    """Return (preference_text, default_text) for the detailed template's background slot."""
    return (
        _require("{background}", "detailed", "background_preference"),
        _require("{background}", "detailed", "background_default"),
    )


def get_concise_template() -> str:
    """Return the concise template (contains {background})."""
    return _require("{background}", "concise", "template")


def get_default_background() -> str:
    """Return the background phrase used when the caller gives no preference."""
    phrase = get_prompt("tryon", "default_background")
    if not phrase:
        raise ConfigurationError("tryon.default_background not found in prompts.yaml.")
    return phrase
