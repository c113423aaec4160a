"""
Result types for one try-on generation.

A GenerationResult is exactly one of GenerationSuccess or GenerationFailure.
The adapter and interpreter return these instead of raising, and only the
HTTP boundary (or CLI) turns a failure into a status code.
"""

from dataclasses import dataclass
from enum import Enum


class FailureKind(str, Enum):
    """Classified reasons a generation request did not produce an image."""

    QUOTA_EXCEEDED = "quota_exceeded"
    SAFETY_BLOCKED = "safety_blocked"
    REQUEST_BLOCKED = "request_blocked"
    EMPTY_UPSTREAM_RESPONSE = "empty_upstream_response"
    NO_IMAGE_PRODUCED = "no_image_produced"
    UPSTREAM_CALL_FAILED = "upstream_call_failed"


@dataclass(frozen=True)
class GenerationSuccess:
    """A generated image (as a data URI) and its accompanying description."""

    image_data_url: str
    mime_type: str
    description: str

    ok = True


@dataclass(frozen=True)
class GenerationFailure:
    """A classified failure with a human-readable message."""

    kind: FailureKind
    message: str
    details: str = ""
    text_response: str | None = None  # model text surfaced alongside the failure
    raised: bool = False  # the upstream call itself raised, no reply to interpret

    ok = False


GenerationResult = GenerationSuccess | GenerationFailure


__all__ = [
    "FailureKind",
    "GenerationFailure",
    "GenerationResult",
    "GenerationSuccess",
]
