"""
Image assets and their binary-to-text encoding.

Uploads are passed through untouched: no decoding, resizing or conversion.
This module carries the declared media type forward (with a per-role fallback
when none is declared) and produces base64 text / data URLs for the generated
image going back to the caller.
"""

import base64
from dataclasses import dataclass

SUBJECT = "subject"
GARMENT = "garment"
OUTPUT = "output"

# Fallback media types when an image does not declare one
DEFAULT_MIME_TYPES = {
    SUBJECT: "image/jpeg",
    GARMENT: "image/png",
    OUTPUT: "image/png",
}


def _normalize_mime(content_type: str | None) -> str:
    """Strip parameters and whitespace from a Content-Type value ('' if absent)."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


@dataclass(frozen=True)
class ImageAsset:
    """An image as raw bytes plus its media type."""

    data: bytes
    mime_type: str
    role: str = SUBJECT

    @classmethod
    def from_bytes(cls, data: bytes, content_type: str | None, role: str) -> "ImageAsset":
        """Build an asset, applying the role's fallback media type when none is declared."""
        mime = _normalize_mime(content_type)
        # Browsers and curl send application/octet-stream when they cannot tell
        if not mime or mime == "application/octet-stream":
            mime = DEFAULT_MIME_TYPES[role]
        return cls(data=data, mime_type=mime, role=role)

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class EncodedImage:
    """Base64 text of an image plus its media type."""

    data_b64: str
    mime_type: str

    @property
    def data_url(self) -> str:
        return create_image_data_url(self.data_b64, self.mime_type)


def encode_asset(asset: ImageAsset) -> EncodedImage:
    """
    Encode an ImageAsset to base64 text.

    Args:
        asset: The image to encode

    Returns:
        EncodedImage with the base64 payload and the asset's media type
    """
    encoded = base64.b64encode(asset.data).decode("ascii")
    return EncodedImage(data_b64=encoded, mime_type=asset.mime_type)


def create_image_data_url(encoded_image: str, mime_type: str = "image/png") -> str:
    """
    Create a data URL from a base64 encoded image.

    Args:
        encoded_image: Base64 encoded image string
        mime_type: MIME type of the image

    Returns:
        Data URL string
    """
    return f"data:{mime_type};base64,{encoded_image}"


def parse_image_data_url(data_url: str) -> tuple[bytes, str]:
    """
    Split a data URL (data:image/xxx;base64,yyy) into raw bytes and MIME type.

    Raises:
        ValueError: If the string is not a base64 data URL
    """
    data_url = data_url.strip()
    if not data_url.startswith("data:"):
        raise ValueError("Not a data URL")
    idx = data_url.find(";base64,")
    if idx == -1:
        raise ValueError("Data URL missing ;base64, part")
    mime = data_url[5:idx].strip().lower() or DEFAULT_MIME_TYPES[OUTPUT]
    payload = base64.b64decode(data_url[idx + 8 :], validate=True)
    return payload, mime
