"""Unit tests for image assets and base64 encoding."""

import base64

import pytest

from tryon.core.encoder import (
    GARMENT,
    OUTPUT,
    SUBJECT,
    EncodedImage,
    ImageAsset,
    create_image_data_url,
    encode_asset,
    parse_image_data_url,
)


@pytest.mark.unit
class TestImageAssetFromBytes:
    """Test media type resolution for uploaded images."""

    def test_declared_type_is_kept(self):
        asset = ImageAsset.from_bytes(b"abc", "image/webp", role=SUBJECT)
        assert asset.mime_type == "image/webp"
        assert asset.role == SUBJECT

    def test_subject_defaults_to_jpeg(self):
        asset = ImageAsset.from_bytes(b"abc", None, role=SUBJECT)
        assert asset.mime_type == "image/jpeg"

    def test_garment_defaults_to_png(self):
        asset = ImageAsset.from_bytes(b"abc", "", role=GARMENT)
        assert asset.mime_type == "image/png"

    def test_octet_stream_counts_as_undeclared(self):
        asset = ImageAsset.from_bytes(b"abc", "application/octet-stream", role=SUBJECT)
        assert asset.mime_type == "image/jpeg"

    def test_parameters_are_stripped(self):
        asset = ImageAsset.from_bytes(b"abc", "Image/PNG; charset=binary", role=SUBJECT)
        assert asset.mime_type == "image/png"

    def test_bytes_pass_through_untouched(self):
        data = bytes(range(256))
        asset = ImageAsset.from_bytes(data, "image/png", role=GARMENT)
        assert asset.data == data
        assert asset.size == 256


@pytest.mark.unit
class TestEncoding:
    """Test base64 text and data URL helpers."""

    def test_encode_asset_is_standard_base64(self):
        data = b"\x89PNG\r\n\x1a\n" + b"\x00\xff" * 10
        encoded = encode_asset(ImageAsset(data=data, mime_type="image/png", role=OUTPUT))
        assert encoded.data_b64 == base64.b64encode(data).decode("ascii")
        assert encoded.mime_type == "image/png"
        assert "\n" not in encoded.data_b64

    def test_data_url(self):
        assert create_image_data_url("QUJD", "image/jpeg") == "data:image/jpeg;base64,QUJD"
        assert EncodedImage("QUJD", "image/png").data_url == "data:image/png;base64,QUJD"

    def test_parse_data_url(self):
        data, mime = parse_image_data_url("data:image/png;base64,QUJD")
        assert data == b"ABC"
        assert mime == "image/png"

    def test_parse_rejects_non_data_url(self):
        with pytest.raises(ValueError):
            parse_image_data_url("https://example.com/a.png")

    def test_parse_rejects_missing_base64_marker(self):
        with pytest.raises(ValueError):
            parse_image_data_url("data:image/png,QUJD")

    def test_parse_rejects_invalid_payload(self):
        with pytest.raises(ValueError):
            parse_image_data_url("data:image/png;base64,not*base64")
