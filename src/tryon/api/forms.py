"""
Multipart form parsing for the try-on endpoint.

Turns the raw request into two ImageAssets and GenerationPreferences, raising
MalformedRequestError / MissingInputError / ValidationError for bad input.
"""

from dataclasses import dataclass

from fastapi import Request
from starlette.datastructures import UploadFile

from tryon.core.encoder import GARMENT, SUBJECT, ImageAsset
from tryon.core.prompt import GenerationPreferences, preferences_from_form
from tryon.logging_config import get_logger
from tryon.utils.exceptions import MalformedRequestError, MissingInputError, ValidationError

logger = get_logger(__name__)

SUBJECT_FIELD = "userImage"
GARMENT_FIELD = "clothingImage"
BACKGROUND_FIELD = "backgroundPreference"
DETAILED_FIELD = "useDetailedPrompt"

MISSING_FILES_MESSAGE = "Both userImage and clothingImage files are required"
MALFORMED_BODY_MESSAGE = "Invalid request body: Failed to parse FormData."

# request.form() silently yields an empty form for any other content type
FORM_MEDIA_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


@dataclass(frozen=True)
class TryOnForm:
    subject: ImageAsset
    garment: ImageAsset
    preferences: GenerationPreferences


def _text_field(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _too_large(field: str, size: int, max_bytes: int) -> ValidationError:
    return ValidationError(
        "Uploaded image is too large",
        field=field,
        details=f"{field} is {size} bytes; the limit is {max_bytes} bytes",
    )


async def _read_upload(upload: UploadFile, field: str, role: str, max_bytes: int) -> ImageAsset:
    # size is known up front for spooled multipart files; re-check after reading
    if upload.size is not None and upload.size > max_bytes:
        raise _too_large(field, upload.size, max_bytes)
    data = await upload.read()
    if len(data) > max_bytes:
        raise _too_large(field, len(data), max_bytes)
    return ImageAsset.from_bytes(data, upload.content_type, role=role)


async def read_tryon_form(request: Request, max_upload_bytes: int) -> TryOnForm:
    """
    Parse and validate the multipart body of a try-on request.

    Args:
        request: Incoming request
        max_upload_bytes: Per-image size limit

    Returns:
        TryOnForm with both images and the caller's preferences

    Raises:
        MalformedRequestError: If the body cannot be parsed as form data
        MissingInputError: If either image is absent or empty
        ValidationError: If an image exceeds the size limit
    """
    content_type = request.headers.get("content-type", "")
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type not in FORM_MEDIA_TYPES:
        logger.error("Error parsing FormData request body: content type %r", content_type)
        raise MalformedRequestError(
            MALFORMED_BODY_MESSAGE,
            details=f"Expected multipart/form-data, got {content_type or 'no content type'}",
        )

    try:
        form = await request.form()
    except Exception as e:
        detail = getattr(e, "detail", None) or str(e)
        logger.error("Error parsing FormData request body: %s", detail)
        raise MalformedRequestError(MALFORMED_BODY_MESSAGE, details=str(detail)) from e

    subject_upload = form.get(SUBJECT_FIELD)
    garment_upload = form.get(GARMENT_FIELD)
    missing = [
        name
        for name, value in ((SUBJECT_FIELD, subject_upload), (GARMENT_FIELD, garment_upload))
        if not isinstance(value, UploadFile)
    ]
    if missing:
        raise MissingInputError(
            MISSING_FILES_MESSAGE,
            field=missing[0],
            details=f"Missing file field(s): {', '.join(missing)}",
        )
    assert isinstance(subject_upload, UploadFile)
    assert isinstance(garment_upload, UploadFile)

    subject = await _read_upload(subject_upload, SUBJECT_FIELD, SUBJECT, max_upload_bytes)
    garment = await _read_upload(garment_upload, GARMENT_FIELD, GARMENT, max_upload_bytes)
    empty = [
        name
        for name, asset in ((SUBJECT_FIELD, subject), (GARMENT_FIELD, garment))
        if not asset.size
    ]
    if empty:
        raise MissingInputError(
            MISSING_FILES_MESSAGE,
            field=empty[0],
            details=f"Empty file field(s): {', '.join(empty)}",
        )

    preferences = preferences_from_form(
        _text_field(form.get(BACKGROUND_FIELD)),
        _text_field(form.get(DETAILED_FIELD)),
    )
    logger.info(
        "User Image: %s, size: %d; Clothing Image: %s, size: %d",
        subject.mime_type,
        subject.size,
        garment.mime_type,
        garment.size,
    )
    return TryOnForm(subject=subject, garment=garment, preferences=preferences)
