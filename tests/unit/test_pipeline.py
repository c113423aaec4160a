"""Unit tests for the try-on pipeline."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from tryon.core.encoder import GARMENT, SUBJECT, ImageAsset
from tryon.core.pipeline import run_tryon
from tryon.core.prompt import GenerationPreferences
from tryon.core.result import FailureKind, GenerationFailure, GenerationSuccess

SUBJECT_ASSET = ImageAsset(data=b"person", mime_type="image/jpeg", role=SUBJECT)
GARMENT_ASSET = ImageAsset(data=b"shirt", mime_type="image/png", role=GARMENT)


def _adapter(outcome) -> MagicMock:
    adapter = MagicMock()
    adapter.model = "gemini-test"
    adapter.generate = AsyncMock(return_value=outcome)
    return adapter


def _image_reply(text=None):
    parts = [SimpleNamespace(inline_data=SimpleNamespace(data=b"PNGDATA", mime_type="image/png"))]
    if text:
        parts.insert(0, SimpleNamespace(inline_data=None, text=text))
    candidate = SimpleNamespace(content=SimpleNamespace(parts=parts), finish_reason="STOP")
    return SimpleNamespace(candidates=[candidate], prompt_feedback=None)


@pytest.mark.unit
class TestRunTryon:
    def test_success_with_metadata(self):
        adapter = _adapter(_image_reply("Nice fit"))
        outcome = asyncio.run(
            run_tryon(SUBJECT_ASSET, GARMENT_ASSET, GenerationPreferences(), adapter)
        )
        assert isinstance(outcome.result, GenerationSuccess)
        assert outcome.result.description == "Nice fit"
        assert outcome.metadata == {
            "promptType": "detailed",
            "backgroundPreference": "default studio",
            "userImageType": "image/jpeg",
            "clothingImageType": "image/png",
            "model": "gemini-test",
        }
        assert outcome.elapsed >= 0

    def test_instruction_and_images_forwarded_in_order(self):
        adapter = _adapter(_image_reply())
        prefs = GenerationPreferences(background="beach", detailed=False)
        outcome = asyncio.run(run_tryon(SUBJECT_ASSET, GARMENT_ASSET, prefs, adapter))
        instruction, subject, garment = adapter.generate.call_args.args
        assert instruction is outcome.instruction
        assert instruction.prompt_type == "concise"
        assert "beach" in instruction.text
        assert subject is SUBJECT_ASSET
        assert garment is GARMENT_ASSET
        assert outcome.metadata["backgroundPreference"] == "beach"

    def test_adapter_failure_passes_through(self):
        failure = GenerationFailure(FailureKind.QUOTA_EXCEEDED, "API quota exceeded.")
        outcome = asyncio.run(
            run_tryon(SUBJECT_ASSET, GARMENT_ASSET, GenerationPreferences(), _adapter(failure))
        )
        assert outcome.result is failure

    def test_reply_without_image(self):
        reply = SimpleNamespace(
            candidates=[
                SimpleNamespace(
                    content=SimpleNamespace(parts=[SimpleNamespace(inline_data=None, text="no")]),
                    finish_reason="STOP",
                )
            ],
            prompt_feedback=None,
        )
        outcome = asyncio.run(
            run_tryon(SUBJECT_ASSET, GARMENT_ASSET, GenerationPreferences(), _adapter(reply))
        )
        assert isinstance(outcome.result, GenerationFailure)
        assert outcome.result.kind is FailureKind.NO_IMAGE_PRODUCED
        assert outcome.result.text_response == "no"
