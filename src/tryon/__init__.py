"""
tryon - AI virtual try-on

Dresses the person in one photo in the garment from another by forwarding both
images and a composed instruction to a Gemini image model.

Library usage:
- Build a Config once (Config.from_env() or explicitly) and pass it to
  GeminiAdapter; there is no shared global configuration.
- run_tryon(subject, garment, preferences, adapter) returns a TryOnOutcome whose
  result is a GenerationSuccess or GenerationFailure; upstream failures are
  returned, not raised.
- Logging: control verbosity with set_verbosity(0|1|2) or configure_logging(verbose_level, quiet);
  TRYON_VERBOSITY env (0/1/2) is read when the CLI runs.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("tryon")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source in development)
    __version__ = "0.0.0.dev"

from tryon.core.config import DEFAULT_MODEL, Config
from tryon.core.encoder import GARMENT, SUBJECT, ImageAsset, create_image_data_url
from tryon.core.gemini import GeminiAdapter
from tryon.core.pipeline import TryOnOutcome, run_tryon
from tryon.core.prompt import (
    ComposedInstruction,
    GenerationPreferences,
    compose_instruction,
    preferences_from_form,
)
from tryon.core.result import (
    FailureKind,
    GenerationFailure,
    GenerationResult,
    GenerationSuccess,
)
from tryon.logging_config import configure_logging, set_verbosity
from tryon.utils.exceptions import (
    ConfigurationError,
    MalformedRequestError,
    MissingInputError,
    TryonError,
    ValidationError,
)

__all__ = [
    "ComposedInstruction",
    "Config",
    "ConfigurationError",
    "DEFAULT_MODEL",
    "FailureKind",
    "GARMENT",
    "GeminiAdapter",
    "GenerationFailure",
    "GenerationPreferences",
    "GenerationResult",
    "GenerationSuccess",
    "ImageAsset",
    "MalformedRequestError",
    "MissingInputError",
    "SUBJECT",
    "TryOnOutcome",
    "TryonError",
    "ValidationError",
    "compose_instruction",
    "configure_logging",
    "create_image_data_url",
    "preferences_from_form",
    "run_tryon",
    "set_verbosity",
]
