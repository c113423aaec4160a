"""Unit tests for the Gemini adapter."""

import asyncio
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.genai import types

from tryon.core.config import Config
from tryon.core.encoder import GARMENT, SUBJECT, ImageAsset
from tryon.core.gemini import (
    QUOTA_MESSAGE,
    SAFETY_MESSAGE,
    GeminiAdapter,
    classify_upstream_error,
)
from tryon.core.prompt import ComposedInstruction
from tryon.core.result import FailureKind, GenerationFailure

SUBJECT_ASSET = ImageAsset(data=b"\xff\xd8SUBJECTPIXELS", mime_type="image/jpeg", role=SUBJECT)
GARMENT_ASSET = ImageAsset(data=b"\x89PNGgarment", mime_type="image/png", role=GARMENT)
INSTRUCTION = ComposedInstruction(text="Dress the person.", prompt_type="detailed")


def _mock_client(response=None, error=None) -> MagicMock:
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=response, side_effect=error)
    return client


@pytest.mark.unit
class TestClassifyUpstreamError:
    def test_quota(self):
        failure = classify_upstream_error(RuntimeError("429 RESOURCE_EXHAUSTED: Quota exceeded"))
        assert failure.kind is FailureKind.QUOTA_EXCEEDED
        assert failure.message == QUOTA_MESSAGE
        assert "Quota exceeded" in failure.details

    def test_safety(self):
        failure = classify_upstream_error(RuntimeError("blocked by Safety settings"))
        assert failure.kind is FailureKind.SAFETY_BLOCKED
        assert failure.message == SAFETY_MESSAGE

    def test_quota_takes_precedence_over_safety(self):
        failure = classify_upstream_error(RuntimeError("quota and safety"))
        assert failure.kind is FailureKind.QUOTA_EXCEEDED

    def test_other_errors_carry_original_message(self):
        failure = classify_upstream_error(ConnectionError("connection reset"))
        assert failure.kind is FailureKind.UPSTREAM_CALL_FAILED
        assert failure.message == "API call failed: connection reset"

    def test_empty_message_uses_exception_name(self):
        failure = classify_upstream_error(TimeoutError())
        assert failure.message == "API call failed: TimeoutError"


@pytest.mark.unit
class TestRequestShape:
    def test_generation_config_from_config(self):
        adapter = GeminiAdapter(Config(gemini_api_key="k"))
        cfg = adapter.build_generation_config()
        assert cfg.temperature == 0.2
        assert cfg.top_p == 0.8
        assert cfg.top_k == 20
        assert cfg.max_output_tokens == 8192
        assert list(cfg.response_modalities) == ["TEXT", "IMAGE"]
        assert len(cfg.safety_settings) == 2
        categories = {s.category.name for s in cfg.safety_settings}
        assert categories == {"HARM_CATEGORY_HARASSMENT", "HARM_CATEGORY_HATE_SPEECH"}
        assert {s.threshold.name for s in cfg.safety_settings} == {"BLOCK_MEDIUM_AND_ABOVE"}

    def test_contents_order_is_instruction_subject_garment(self):
        adapter = GeminiAdapter(Config(gemini_api_key="k"))
        contents = adapter.build_contents(INSTRUCTION, SUBJECT_ASSET, GARMENT_ASSET)
        assert len(contents) == 1
        parts = contents[0].parts
        assert parts[0].text == "Dress the person."
        assert parts[1].inline_data.data == SUBJECT_ASSET.data
        assert parts[1].inline_data.mime_type == "image/jpeg"
        assert parts[2].inline_data.data == GARMENT_ASSET.data
        assert parts[2].inline_data.mime_type == "image/png"


@pytest.mark.unit
class TestGenerate:
    async def _generate(self, adapter: GeminiAdapter):
        return await adapter.generate(INSTRUCTION, SUBJECT_ASSET, GARMENT_ASSET)

    def test_returns_raw_reply(self):
        reply = types.GenerateContentResponse(candidates=[])
        client = _mock_client(response=reply)
        adapter = GeminiAdapter(Config(gemini_api_key="k", model="m-1"), client=client)

        outcome = asyncio.run(self._generate(adapter))

        assert outcome is reply
        kwargs = client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "m-1"
        assert isinstance(kwargs["config"], types.GenerateContentConfig)
        assert len(kwargs["contents"][0].parts) == 3

    def test_sdk_error_becomes_failure(self):
        client = _mock_client(error=RuntimeError("Quota exceeded for project"))
        adapter = GeminiAdapter(Config(gemini_api_key="k"), client=client)

        outcome = asyncio.run(self._generate(adapter))

        assert isinstance(outcome, GenerationFailure)
        assert outcome.kind is FailureKind.QUOTA_EXCEEDED
        assert outcome.raised is True

    def test_missing_api_key_fails_at_call_time(self):
        adapter = GeminiAdapter(Config(gemini_api_key=""))
        outcome = asyncio.run(self._generate(adapter))
        assert isinstance(outcome, GenerationFailure)
        assert outcome.kind is FailureKind.UPSTREAM_CALL_FAILED
        assert "GEMINI_API_KEY" in outcome.message

    def test_client_built_lazily_from_key(self):
        with patch("tryon.core.gemini.genai.Client") as client_cls:
            adapter = GeminiAdapter(Config(gemini_api_key="secret"))
            client_cls.assert_not_called()
            adapter._get_client()
            adapter._get_client()
        client_cls.assert_called_once_with(api_key="secret")

    def test_configured_key_is_registered_for_redaction(self):
        with patch("tryon.core.gemini.redact_secret") as redact:
            GeminiAdapter(Config(gemini_api_key="flag-key"))
        redact.assert_called_once_with("flag-key")

    def test_debug_api_logs_shape_without_image_bytes(self, caplog):
        client = _mock_client(response=SimpleNamespace(candidates=None))
        adapter = GeminiAdapter(Config(gemini_api_key="k", debug_api=True), client=client)
        with caplog.at_level(logging.INFO, logger="tryon"):
            asyncio.run(self._generate(adapter))
        logged = " ".join(r.getMessage() for r in caplog.records)
        assert "image/jpeg" in logged
        assert "SUBJECTPIXELS" not in logged
