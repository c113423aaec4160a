"""
Interpretation of the Gemini reply.

Each content part is classified once into an ImageFragment or TextFragment;
the reply as a whole is then mapped to a GenerationResult:

1. no candidates -> RequestBlocked (prompt feedback has a block reason)
   or EmptyUpstreamResponse
2. first candidate stopped for safety -> SafetyBlocked
3. first image fragment becomes the output, first text fragment the description
4. no image fragment -> NoImageProduced (text still surfaced)
5. otherwise Success
"""

from dataclasses import dataclass
from typing import Any

from tryon.core.encoder import (
    DEFAULT_MIME_TYPES,
    OUTPUT,
    EncodedImage,
    ImageAsset,
    encode_asset,
)
from tryon.core.result import (
    FailureKind,
    GenerationFailure,
    GenerationResult,
    GenerationSuccess,
)
from tryon.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_DESCRIPTION = "Virtual try-on completed successfully"
SAFETY_FINISH_REASON = "SAFETY"

_TEXT_LOG_MAX = 150


@dataclass(frozen=True)
class ImageFragment:
    image: EncodedImage


@dataclass(frozen=True)
class TextFragment:
    text: str


Fragment = ImageFragment | TextFragment


def _enum_name(value: Any) -> str | None:
    """Return the name of an SDK enum value (or the value itself if it is a str)."""
    if value is None:
        return None
    name = getattr(value, "name", None)
    if isinstance(name, str):
        return name
    return str(value)


def classify_part(part: Any) -> Fragment | None:
    """
    Classify one reply part.

    Returns:
        ImageFragment for non-empty inline data, TextFragment for non-empty
        text, None for anything else (including model "thought" parts).
    """
    if getattr(part, "thought", False):
        return None
    inline = getattr(part, "inline_data", None)
    if inline is not None and inline.data:
        data = inline.data
        if isinstance(data, str):
            # already base64 text
            mime = inline.mime_type or DEFAULT_MIME_TYPES[OUTPUT]
            return ImageFragment(EncodedImage(data_b64=data, mime_type=mime))
        asset = ImageAsset.from_bytes(data, inline.mime_type, role=OUTPUT)
        return ImageFragment(encode_asset(asset))
    text = getattr(part, "text", None)
    if text:
        return TextFragment(text)
    return None


def _block_reason(reply: Any) -> str | None:
    feedback = getattr(reply, "prompt_feedback", None)
    if feedback is None:
        return None
    reason = getattr(feedback, "block_reason", None)
    return _enum_name(reason) if reason else None


def interpret_response(reply: Any) -> GenerationResult:
    """
    Map a generate_content reply to a GenerationResult.

    Args:
        reply: google.genai GenerateContentResponse (or an object of the same shape)

    Returns:
        GenerationSuccess or a classified GenerationFailure; never raises for
        a reply of the expected shape.
    """
    candidates = getattr(reply, "candidates", None) or []
    if not candidates:
        reason = _block_reason(reply)
        if reason:
            logger.error("Prompt blocked: %s", reason)
            return GenerationFailure(
                FailureKind.REQUEST_BLOCKED,
                "Request was blocked",
                details=f"Reason: {reason}",
            )
        logger.error("No candidates in API response")
        return GenerationFailure(
            FailureKind.EMPTY_UPSTREAM_RESPONSE,
            "No valid response generated from the API",
        )

    candidate = candidates[0]
    if _enum_name(getattr(candidate, "finish_reason", None)) == SAFETY_FINISH_REASON:
        logger.error("Content generation blocked by safety filters")
        return GenerationFailure(
            FailureKind.SAFETY_BLOCKED,
            "Content generation was blocked by safety filters",
            details="Please try with different images that comply with content policies",
        )

    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        logger.error("No parts found in the response candidate")
    else:
        logger.debug("Processing response parts: %d", len(parts))

    image: EncodedImage | None = None
    text: str | None = None
    for part in parts:
        fragment = classify_part(part)
        if isinstance(fragment, ImageFragment) and image is None:
            image = fragment.image
            logger.info(
                "Image generated, mime_type=%s encoded_size=%d",
                image.mime_type,
                len(image.data_b64),
            )
        elif isinstance(fragment, TextFragment) and text is None:
            text = fragment.text
            logger.debug("Text response: %s", text[:_TEXT_LOG_MAX])

    if image is None:
        logger.error("No image data received from API")
        return GenerationFailure(
            FailureKind.NO_IMAGE_PRODUCED,
            "No image was generated",
            details="The AI model did not produce an image output",
            text_response=text,
        )

    return GenerationSuccess(
        image_data_url=image.data_url,
        mime_type=image.mime_type,
        description=text or DEFAULT_DESCRIPTION,
    )
