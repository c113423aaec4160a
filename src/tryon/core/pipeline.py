"""
One try-on request end to end: compose, call, interpret.

No state is kept between calls; the adapter (and the Config inside it) is the
only shared value and is read-only.
"""

import time
from dataclasses import dataclass

from tryon.core.encoder import ImageAsset
from tryon.core.gemini import GeminiAdapter
from tryon.core.interpreter import interpret_response
from tryon.core.prompt import ComposedInstruction, GenerationPreferences, compose_instruction
from tryon.core.result import GenerationFailure, GenerationResult
from tryon.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TryOnOutcome:
    """The result of one request plus what went into it."""

    result: GenerationResult
    instruction: ComposedInstruction
    preferences: GenerationPreferences
    subject_mime_type: str
    garment_mime_type: str
    model: str
    elapsed: float

    @property
    def metadata(self) -> dict[str, str]:
        """Request metadata echoed back to the caller."""
        return {
            "promptType": self.instruction.prompt_type,
            "backgroundPreference": self.preferences.background or "default studio",
            "userImageType": self.subject_mime_type,
            "clothingImageType": self.garment_mime_type,
            "model": self.model,
        }


async def run_tryon(
    subject: ImageAsset,
    garment: ImageAsset,
    preferences: GenerationPreferences,
    adapter: GeminiAdapter,
) -> TryOnOutcome:
    """
    Run the try-on pipeline for one pair of images.

    Args:
        subject: Photo of the person (identity, pose)
        garment: Photo of the clothing item
        preferences: Background and template choice
        adapter: Configured Gemini adapter

    Returns:
        TryOnOutcome; its result is a GenerationSuccess or GenerationFailure

    Raises:
        ConfigurationError: If the prompt templates cannot be loaded
    """
    start_time = time.time()
    instruction = compose_instruction(preferences)
    logger.info("Using %s prompt", instruction.prompt_type)

    outcome = await adapter.generate(instruction, subject, garment)
    result: GenerationResult
    if isinstance(outcome, GenerationFailure):
        result = outcome
    else:
        result = interpret_response(outcome)

    elapsed = time.time() - start_time
    if isinstance(result, GenerationFailure):
        logger.warning("Try-on failed in %.1fs kind=%s", elapsed, result.kind.value)
    else:
        logger.info("Try-on completed in %.1fs", elapsed)

    return TryOnOutcome(
        result=result,
        instruction=instruction,
        preferences=preferences,
        subject_mime_type=subject.mime_type,
        garment_mime_type=garment.mime_type,
        model=adapter.model,
        elapsed=elapsed,
    )
