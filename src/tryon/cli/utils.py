"""
Utility functions for the CLI.

This module contains helper functions used by CLI commands,
such as path generation, media type sniffing and exit code constants.
"""

from datetime import datetime

# Exit codes
EXIT_UPSTREAM = 1
EXIT_VALIDATION_OR_CONFIG = 2

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/heic": "heic",
}


def default_output_path(mime_type: str) -> str:
    """Return default output path: tryon_<YYYYMMDD>_<HHMMSS>.<ext> in current directory."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    ext = _EXTENSIONS.get(mime_type, "png")
    return f"tryon_{timestamp}.{ext}"


def sniff_mime_type(data: bytes) -> str | None:
    """Infer an image media type from magic bytes. Returns None when unknown."""
    if len(data) < 12:
        return None
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if data[:2] == b"\xff\xd8":
        return "image/jpeg"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[4:12] in (b"ftypheic", b"ftypheix", b"ftypmif1"):
        return "image/heic"
    return None


__all__ = [
    "EXIT_UPSTREAM",
    "EXIT_VALIDATION_OR_CONFIG",
    "default_output_path",
    "sniff_mime_type",
]
