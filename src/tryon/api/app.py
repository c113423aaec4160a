"""
HTTP API for tryon.

POST /api/tryon takes the multipart form (userImage, clothingImage,
backgroundPreference, useDetailedPrompt) and returns the generated image as a
data URI. Every failure becomes one JSON response here; nothing below this
layer knows about status codes.
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tryon import __version__
from tryon.api.forms import read_tryon_form
from tryon.core.config import Config
from tryon.core.gemini import GeminiAdapter
from tryon.core.pipeline import TryOnOutcome, run_tryon
from tryon.core.result import FailureKind, GenerationFailure
from tryon.logging_config import get_logger
from tryon.utils.exceptions import ValidationError

logger = get_logger(__name__)

GENERIC_ERROR = "Failed to process virtual try-on request"
CLIENT_SUGGESTION = "Please check your request and try again"
SERVER_SUGGESTION = "Please try again later or contact support if the issue persists"
BLOCKED_SUGGESTION = "Please try with different images or modify your request"

_CLIENT_ERROR_MARKERS = ("quota", "safety", "blocked")

router = APIRouter()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def is_client_error(message: str) -> bool:
    """True when a failure message names a quota, safety or blocking cause."""
    lowered = message.lower()
    return any(marker in lowered for marker in _CLIENT_ERROR_MARKERS)


def generic_error_response(message: str) -> JSONResponse:
    """Catch-all failure body; status chosen by inspecting the message."""
    client = is_client_error(message)
    return JSONResponse(
        {
            "error": GENERIC_ERROR,
            "details": message,
            "timestamp": _timestamp(),
            "suggestion": CLIENT_SUGGESTION if client else SERVER_SUGGESTION,
        },
        status_code=400 if client else 500,
    )


def failure_response(failure: GenerationFailure) -> JSONResponse:
    """Translate a classified pipeline failure into an HTTP response."""
    if failure.raised:
        # upstream call raised: classified message through the catch-all body
        return generic_error_response(failure.message)
    if failure.kind is FailureKind.SAFETY_BLOCKED:
        return JSONResponse(
            {"error": failure.message, "details": failure.details},
            status_code=400,
        )
    if failure.kind is FailureKind.REQUEST_BLOCKED:
        return JSONResponse(
            {
                "error": failure.message,
                "details": failure.details,
                "suggestion": BLOCKED_SUGGESTION,
            },
            status_code=400,
        )
    if failure.kind is FailureKind.NO_IMAGE_PRODUCED:
        return JSONResponse(
            {
                "error": failure.message,
                "details": failure.details,
                "textResponse": failure.text_response,
                "timestamp": _timestamp(),
                "suggestion": SERVER_SUGGESTION,
            },
            status_code=500,
        )
    # empty reply shares the catch-all body
    return generic_error_response(failure.message)


def success_response(outcome: TryOnOutcome) -> JSONResponse:
    result = outcome.result
    assert not isinstance(result, GenerationFailure)
    return JSONResponse(
        {
            "success": True,
            "image": result.image_data_url,
            "description": result.description,
            "metadata": outcome.metadata,
        }
    )


def validation_error_response(exc: ValidationError) -> JSONResponse:
    body: dict[str, Any] = {"error": str(exc), "details": exc.details}
    if exc.field:
        body["field"] = exc.field
    return JSONResponse(body, status_code=400)


def get_adapter(request: Request) -> GeminiAdapter:
    return request.app.state.adapter


@router.post("/tryon")
async def tryon(request: Request) -> JSONResponse:
    """Dress the person in userImage with the garment in clothingImage."""
    config: Config = request.app.state.config
    try:
        form = await read_tryon_form(request, config.max_upload_bytes)
    except ValidationError as e:
        logger.warning("Rejected try-on request: %s (%s)", e, e.details)
        return validation_error_response(e)

    adapter = get_adapter(request)
    try:
        outcome = await run_tryon(form.subject, form.garment, form.preferences, adapter)
    except Exception as e:
        logger.exception("Error processing virtual try-on request: %s", e)
        return generic_error_response(str(e) or e.__class__.__name__)

    if isinstance(outcome.result, GenerationFailure):
        return failure_response(outcome.result)
    return success_response(outcome)


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Liveness check; reports whether a credential is configured."""
    config: Config = request.app.state.config
    return {
        "status": "ok",
        "version": __version__,
        "model": config.model,
        "apiKeyConfigured": config.has_api_key,
    }


def create_app(config: Config | None = None, adapter: GeminiAdapter | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Configuration; read from the environment when omitted
        adapter: Gemini adapter; built from config when omitted

    Returns:
        Configured FastAPI app
    """
    config = config or Config.from_env()
    config.validate()

    app = FastAPI(
        title="tryon",
        description="Virtual try-on: dress a person photo in a garment photo via Gemini",
        version=__version__,
    )
    app.state.config = config
    app.state.adapter = adapter or GeminiAdapter(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix="/api")
    logger.info(
        "API ready model=%s api_key_configured=%s", config.model, config.has_api_key
    )
    return app
