"""
Configuration management for tryon.

This module handles the Gemini API key, model selection, sampling parameters
and upload limits. A Config is built once at process start and passed
explicitly to the components that need it.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from tryon.logging_config import get_logger
from tryon.utils.exceptions import ConfigurationError

logger = get_logger(__name__)

# Load environment variables from .env file
load_dotenv()

# Default configuration constants
DEFAULT_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_TEMPERATURE = 0.2
DEFAULT_TOP_P = 0.8
DEFAULT_TOP_K = 20
DEFAULT_MAX_OUTPUT_TOKENS = 8192
DEFAULT_SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"
DEFAULT_SAFETY_CATEGORIES = ("HARM_CATEGORY_HARASSMENT", "HARM_CATEGORY_HATE_SPEECH")
DEFAULT_RESPONSE_MODALITIES = ("TEXT", "IMAGE")
DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024  # 20 MiB per image


@dataclass
class Config:
    """Configuration for the try-on pipeline."""

    # API Configuration (gemini_api_key excluded from repr to avoid leaking secrets)
    gemini_api_key: str = field(default="", repr=False)
    model: str = DEFAULT_MODEL

    # Sampling configuration sent with every request
    temperature: float = DEFAULT_TEMPERATURE
    top_p: float = DEFAULT_TOP_P
    top_k: int = DEFAULT_TOP_K
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS
    response_modalities: tuple[str, ...] = DEFAULT_RESPONSE_MODALITIES
    safety_categories: tuple[str, ...] = DEFAULT_SAFETY_CATEGORIES
    safety_threshold: str = DEFAULT_SAFETY_THRESHOLD

    # Upload limits (bytes, per image)
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    # Origins allowed to call the HTTP API from a browser
    cors_origins: tuple[str, ...] = ("*",)

    # Debug: log request/reply structure with image data truncated
    debug_api: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create a Config instance from environment variables.

        Environment variables:
            GEMINI_API_KEY: Required for generation (absence is logged, not raised)
            TRYON_MODEL: Optional model identifier
            TRYON_TEMPERATURE, TRYON_TOP_P, TRYON_TOP_K, TRYON_MAX_OUTPUT_TOKENS:
                Optional sampling overrides
            TRYON_MAX_UPLOAD_BYTES: Optional per-image upload limit
            TRYON_CORS_ORIGINS: Optional comma-separated browser origins (default "*")
            TRYON_DEBUG_API: "1"/"true"/"yes" to log request/reply structure

        Returns:
            Config instance populated from environment

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed
        """
        api_key = os.getenv("GEMINI_API_KEY", "").strip()
        if not api_key:
            logger.error(
                "Missing GEMINI_API_KEY environment variable; generation requests will fail."
            )

        def _num_env(name: str, default: float, cast: type) -> float:
            val = os.getenv(name)
            if val is None or val.strip() == "":
                return default
            try:
                return cast(val.strip())
            except ValueError as e:
                raise ConfigurationError(f"{name} must be a number, got {val!r}.") from e

        debug_api = os.getenv("TRYON_DEBUG_API", "").strip().lower() in ("1", "true", "yes")
        cors_origins = tuple(
            origin.strip()
            for origin in os.getenv("TRYON_CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ) or ("*",)

        return cls(
            gemini_api_key=api_key,
            model=os.getenv("TRYON_MODEL", "").strip() or DEFAULT_MODEL,
            temperature=_num_env("TRYON_TEMPERATURE", DEFAULT_TEMPERATURE, float),
            top_p=_num_env("TRYON_TOP_P", DEFAULT_TOP_P, float),
            top_k=int(_num_env("TRYON_TOP_K", DEFAULT_TOP_K, int)),
            max_output_tokens=int(
                _num_env("TRYON_MAX_OUTPUT_TOKENS", DEFAULT_MAX_OUTPUT_TOKENS, int)
            ),
            max_upload_bytes=int(
                _num_env("TRYON_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES, int)
            ),
            cors_origins=cors_origins,
            debug_api=debug_api,
        )

    @property
    def has_api_key(self) -> bool:
        """True when a Gemini API key is configured."""
        return bool(self.gemini_api_key)

    def validate(self) -> None:
        """
        Validate the configuration values.

        The API key is deliberately not required here: a missing key only
        fails the first generation call.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        logger.debug("Validating config")

        if not self.model:
            raise ConfigurationError("Model identifier cannot be empty.")
        if not 0.0 <= self.temperature <= 2.0:
            raise ConfigurationError(
                f"temperature must be between 0 and 2, got {self.temperature}."
            )
        if not 0.0 < self.top_p <= 1.0:
            raise ConfigurationError(f"top_p must be in (0, 1], got {self.top_p}.")
        if self.top_k <= 0:
            raise ConfigurationError(f"top_k must be positive, got {self.top_k}.")
        if self.max_output_tokens <= 0:
            raise ConfigurationError(
                f"max_output_tokens must be positive, got {self.max_output_tokens}."
            )
        if self.max_upload_bytes <= 0:
            raise ConfigurationError(
                f"max_upload_bytes must be positive, got {self.max_upload_bytes}."
            )
