"""
Gemini call adapter for the try-on request.

Sends the composed instruction and the two images to the Gemini image model in
a single generate_content call. There is no retry, streaming or cancellation:
the call completes or fails as a whole. Failures are returned as
GenerationFailure values rather than raised.
"""

import json
import time
from typing import Any

from google import genai
from google.genai import types

from tryon.core.config import Config
from tryon.core.encoder import ImageAsset
from tryon.core.prompt import ComposedInstruction
from tryon.core.result import FailureKind, GenerationFailure
from tryon.logging_config import get_logger, redact_secret

logger = get_logger(__name__)

QUOTA_MESSAGE = "API quota exceeded. Please try again later."
SAFETY_MESSAGE = "Content was blocked by safety filters. Please try different images."

AdapterOutcome = types.GenerateContentResponse | GenerationFailure


def classify_upstream_error(exc: BaseException) -> GenerationFailure:
    """
    Map an exception from the upstream call to a classified failure.

    Inspection is by message substring, case-insensitive: "quota" first, then
    "safety"; anything else is a generic call failure carrying the original text.
    """
    original = str(exc) or exc.__class__.__name__
    lowered = original.lower()
    if "quota" in lowered:
        return GenerationFailure(
            FailureKind.QUOTA_EXCEEDED, QUOTA_MESSAGE, details=original, raised=True
        )
    if "safety" in lowered:
        return GenerationFailure(
            FailureKind.SAFETY_BLOCKED, SAFETY_MESSAGE, details=original, raised=True
        )
    return GenerationFailure(
        FailureKind.UPSTREAM_CALL_FAILED,
        f"API call failed: {original}",
        details=original,
        raised=True,
    )


def _summarize_contents_for_log(contents: list[types.Content]) -> list[dict[str, Any]]:
    """Describe request parts without image bytes, for debug logging."""
    summary: list[dict[str, Any]] = []
    for content in contents:
        for part in content.parts or []:
            if part.inline_data is not None:
                size = len(part.inline_data.data or b"")
                summary.append({"inline_data": f"<{part.inline_data.mime_type}, {size} bytes>"})
            elif part.text is not None:
                summary.append({"text": f"<{len(part.text)} chars>"})
    return summary


class GeminiAdapter:
    """Adapter for the Gemini generate_content call."""

    def __init__(self, config: Config, client: genai.Client | None = None) -> None:
        """Initialize the adapter.

        Args:
            config: Process configuration (credential, model, sampling settings).
            client: Optional pre-built client; otherwise one is created from
                config on the first call.
        """
        self._config = config
        self._client = client
        if config.gemini_api_key:
            redact_secret(config.gemini_api_key)

    @property
    def model(self) -> str:
        return self._config.model

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._config.gemini_api_key:
                raise ValueError("GEMINI_API_KEY is not configured")
            self._client = genai.Client(api_key=self._config.gemini_api_key)
            logger.debug("Created Gemini client model=%s", self._config.model)
        return self._client

    def build_generation_config(self) -> types.GenerateContentConfig:
        """Fixed sampling, modality and safety configuration from Config."""
        cfg = self._config
        return types.GenerateContentConfig(
            temperature=cfg.temperature,
            top_p=cfg.top_p,
            top_k=cfg.top_k,
            max_output_tokens=cfg.max_output_tokens,
            response_modalities=list(cfg.response_modalities),
            safety_settings=[
                types.SafetySetting(category=category, threshold=cfg.safety_threshold)
                for category in cfg.safety_categories
            ],
        )

    def build_contents(
        self,
        instruction: ComposedInstruction,
        subject: ImageAsset,
        garment: ImageAsset,
    ) -> list[types.Content]:
        """Instruction first, then subject, then garment; the templates rely on this order."""
        return [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_text(text=instruction.text),
                    types.Part.from_bytes(data=subject.data, mime_type=subject.mime_type),
                    types.Part.from_bytes(data=garment.data, mime_type=garment.mime_type),
                ],
            )
        ]

    async def generate(
        self,
        instruction: ComposedInstruction,
        subject: ImageAsset,
        garment: ImageAsset,
    ) -> AdapterOutcome:
        """Send one generation request.

        Args:
            instruction: Composed instruction text.
            subject: Image supplying identity and pose.
            garment: Image supplying the clothing.

        Returns:
            The raw reply on success, or a classified GenerationFailure.
        """
        contents = self.build_contents(instruction, subject, garment)
        config = self.build_generation_config()
        logger.info(
            "Generating try-on model=%s prompt_type=%s subject=%s (%d bytes) garment=%s (%d bytes)",
            self._config.model,
            instruction.prompt_type,
            subject.mime_type,
            subject.size,
            garment.mime_type,
            garment.size,
        )
        if self._config.debug_api:
            logger.info(
                "API request parts (image data truncated): %s",
                json.dumps(_summarize_contents_for_log(contents)),
            )

        start_time = time.time()
        try:
            client = self._get_client()
            response = await client.aio.models.generate_content(
                model=self._config.model,
                contents=contents,
                config=config,
            )
        except Exception as e:
            logger.error("Error in Gemini API call: %s", e)
            return classify_upstream_error(e)

        elapsed = time.time() - start_time
        finish_reason = None
        if response.candidates:
            finish_reason = response.candidates[0].finish_reason
        logger.info("Gemini API responded in %.1fs finish_reason=%s", elapsed, finish_reason)
        return response
