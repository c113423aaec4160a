"""
Logging setup for tryon.

All modules log under the "tryon" logger (see get_logger). Nothing is printed
until the CLI, the API server or a library user calls configure_logging or
set_verbosity.

Verbosity:
- 0: INFO; one line per request, outcome and timing
- 1: INFO plus the composed instruction text
- 2: DEBUG; also request shape and reply fragments, plus HTTP client chatter

Image bytes are never logged, and the Gemini API key is masked by
ApiKeyRedactionFilter wherever it would appear in a message.
"""

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "tryon"

# level -> (tryon logger level, log instruction text)
_VERBOSITY_TABLE = {
    0: (logging.INFO, False),
    1: (logging.INFO, True),
    2: (logging.DEBUG, True),
}

# Chatty libraries: silent below verbosity 2, routed through the tryon handler at 2
_THIRD_PARTY_LOGGERS = ("google_genai", "httpx", "httpcore", "urllib3")

_state = {"log_prompts": False, "handler": None}


class ApiKeyRedactionFilter(logging.Filter):
    """
    Replace API keys with a mask in any record that contains one.

    Masks GEMINI_API_KEY from the environment plus every key registered with
    add_secret (e.g. one passed on the command line).
    """

    MASK = "***"

    def __init__(self, secrets: tuple[str, ...] = ()) -> None:
        super().__init__()
        self._secrets = {s for s in secrets if s}

    def add_secret(self, secret: str) -> None:
        if secret:
            self._secrets.add(secret)

    def filter(self, record: logging.LogRecord) -> bool:
        secrets = set(self._secrets)
        env_secret = os.environ.get("GEMINI_API_KEY", "").strip()
        if env_secret:
            secrets.add(env_secret)
        if not secrets:
            return True
        message = record.getMessage()
        masked = message
        for secret in secrets:
            masked = masked.replace(secret, self.MASK)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


_redaction_filter = ApiKeyRedactionFilter()


def redact_secret(secret: str) -> None:
    """Mask this value in everything written by the tryon log handler."""
    _redaction_filter.add_secret(secret.strip())


def _handler() -> logging.Handler:
    if _state["handler"] is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(_redaction_filter)
        _state["handler"] = handler
    return _state["handler"]


def _root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    handler = _handler()
    if handler not in root.handlers:
        root.addHandler(handler)
    return root


def _route_third_party(verbose: bool) -> None:
    handler = _handler()
    for name in _THIRD_PARTY_LOGGERS:
        lib_logger = logging.getLogger(name)
        if verbose:
            lib_logger.setLevel(logging.DEBUG)
            if handler not in lib_logger.handlers:
                lib_logger.addHandler(handler)
        else:
            lib_logger.setLevel(logging.WARNING)
            lib_logger.removeHandler(handler)


def set_verbosity(level: int) -> None:
    """Apply verbosity 0, 1 or 2 (lower values act as 0, higher as 2)."""
    level = max(0, min(level, 2))
    log_level, with_prompts = _VERBOSITY_TABLE[level]
    _root().setLevel(log_level)
    _state["log_prompts"] = with_prompts
    _route_third_party(level == 2)


def log_prompts() -> bool:
    """True when composed instruction text should be logged."""
    return bool(_state["log_prompts"])


def configure_logging(verbose_level: int = 0, quiet: bool = False) -> None:
    """Entry point for the CLI and server: quiet means WARNING and above only."""
    if not quiet:
        set_verbosity(verbose_level)
        return
    _root().setLevel(logging.WARNING)
    _state["log_prompts"] = False
    _route_third_party(False)


def get_verbosity_from_env() -> int:
    """TRYON_VERBOSITY as 0, 1 or 2; anything else counts as 0."""
    raw = os.environ.get("TRYON_VERBOSITY", "").strip()
    return int(raw) if raw in ("0", "1", "2") else 0


def get_logger(name: str) -> logging.Logger:
    """Logger nested under "tryon"; names already in that tree are used as-is."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


__all__ = [
    "ApiKeyRedactionFilter",
    "configure_logging",
    "get_logger",
    "get_verbosity_from_env",
    "log_prompts",
    "redact_secret",
    "set_verbosity",
]
