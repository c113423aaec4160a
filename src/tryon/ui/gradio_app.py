"""
Gradio web UI for tryon.

Single-page UI: upload a photo of yourself and a clothing item, optionally
describe a background and pick the concise prompt, then view the result.
The UI talks to the HTTP API (POST /api/tryon) like any other client.
"""

import argparse
import io
import os
from typing import Any

import gradio as gr
import requests
from PIL import Image

from tryon import __version__
from tryon.core.encoder import parse_image_data_url
from tryon.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_UI_PORT = 7860
DEFAULT_UI_HOST = "127.0.0.1"
DEFAULT_API_URL = "http://127.0.0.1:8000"

# Generation can take a while; this only bounds how long the page waits
UI_REQUEST_TIMEOUT = 300

PAGE_TITLE = "tryon – AI virtual try-on"
MISSING_IMAGES_MESSAGE = "Please upload both your photo and a clothing item image."


def _format_status(message: str, status_type: str = "info") -> str:
    """
    Format a status message with color and icon.

    Args:
        message: The status message text.
        status_type: One of "info", "success", "error", "idle".

    Returns:
        HTML-formatted status string.
    """
    if status_type == "success":
        icon, color, bg_color = "✅", "#10b981", "#d1fae5"
    elif status_type == "error":
        icon, color, bg_color = "❌", "#ef4444", "#fee2e2"
    elif status_type == "info":
        icon, color, bg_color = "ℹ️", "#3b82f6", "#dbeafe"
    else:  # idle
        return ""

    return f"""<div style="padding: 12px 16px; border-radius: 8px; background-color: {bg_color}; border-left: 4px solid {color}; margin: 8px 0;">
    <span style="font-size: 16px; margin-right: 8px;">{icon}</span>
    <span style="color: {color}; font-weight: 500;">{message}</span>
</div>"""


def _image_to_upload(image: Image.Image, name: str) -> tuple[str, bytes, str]:
    """Serialize a PIL image as a multipart file tuple (filename, bytes, content type)."""
    buf = io.BytesIO()
    if image.format == "JPEG":
        image.save(buf, format="JPEG", quality=95)
        return (f"{name}.jpg", buf.getvalue(), "image/jpeg")
    image.save(buf, format="PNG")
    return (f"{name}.png", buf.getvalue(), "image/png")


def _error_message(status_code: int, body: Any) -> str:
    """Build a user-facing message from an API error body."""
    if not isinstance(body, dict):
        return f"API Error: {status_code}"
    message = str(body.get("error") or f"API Error: {status_code}")
    details = body.get("details")
    if details:
        message = f"{message}: {details}"
    text = body.get("textResponse")
    if text:
        message = f"{message} (model said: {text})"
    return message


def _call_api(
    api_url: str,
    subject: Image.Image,
    garment: Image.Image,
    background: str,
    detailed: bool,
) -> requests.Response:
    files = {
        "userImage": _image_to_upload(subject, "user"),
        "clothingImage": _image_to_upload(garment, "clothing"),
    }
    data = {"useDetailedPrompt": "true" if detailed else "false"}
    if background and background.strip():
        data["backgroundPreference"] = background.strip()
    url = f"{api_url.rstrip('/')}/api/tryon"
    logger.debug("POST %s detailed=%s", url, detailed)
    return requests.post(url, files=files, data=data, timeout=UI_REQUEST_TIMEOUT)


def _run_tryon(
    subject: Image.Image | None,
    garment: Image.Image | None,
    background: str,
    detailed: bool,
    api_url: str,
) -> tuple[Image.Image | None, str, str]:
    """
    Submit one try-on request and return (image, description, status_html).

    On any failure the image is None and the status carries the error text.
    """
    if subject is None or garment is None:
        return None, "", _format_status(MISSING_IMAGES_MESSAGE, "error")

    try:
        response = _call_api(api_url, subject, garment, background, detailed)
    except requests.exceptions.ConnectionError:
        logger.error("Could not reach tryon API at %s", api_url)
        return (
            None,
            "",
            _format_status(
                f"Could not reach the tryon API at {api_url}. Is `tryon serve` running?",
                "error",
            ),
        )
    except requests.exceptions.RequestException as e:
        logger.error("Request to tryon API failed: %s", e)
        return None, "", _format_status(f"Request failed: {e}", "error")

    try:
        body = response.json()
    except ValueError:
        body = None

    if response.status_code != 200 or not isinstance(body, dict):
        return None, "", _format_status(_error_message(response.status_code, body), "error")

    image_url = body.get("image")
    if not image_url:
        return None, "", _format_status("API did not return a generated image.", "error")
    try:
        image_bytes, _mime = parse_image_data_url(image_url)
        image = Image.open(io.BytesIO(image_bytes)).copy()
    except (ValueError, OSError) as e:
        logger.error("Could not decode generated image: %s", e)
        return None, "", _format_status("The generated image could not be decoded.", "error")

    description = str(body.get("description") or "")
    prompt_type = (body.get("metadata") or {}).get("promptType", "")
    status = "Done" + (f" ({prompt_type} prompt)" if prompt_type else "")
    return image, description, _format_status(status, "success")


def _reset_form() -> tuple[None, None, str, bool, None, str, str]:
    """Cleared values for (subject, garment, background, detailed, result, description, status)."""
    return None, None, "", True, None, "", _format_status("", "idle")


def _build_blocks(api_url: str) -> gr.Blocks:
    with gr.Blocks(title=PAGE_TITLE) as app:
        gr.Markdown(f"# Virtual Try-On\nUpload your photo and a clothing item. v{__version__}")
        status_html = gr.HTML(value="", visible=True)

        with gr.Row():
            subject_img = gr.Image(label="Your photo", type="pil", sources=["upload", "webcam"])
            garment_img = gr.Image(label="Clothing item", type="pil", sources=["upload"])

        with gr.Row():
            background_tb = gr.Textbox(
                label="Background (optional)",
                placeholder="e.g. a sunny beach at golden hour",
                scale=3,
            )
            detailed_cb = gr.Checkbox(label="Detailed prompt", value=True, scale=1)

        with gr.Row():
            tryon_btn = gr.Button("Try it on", variant="primary", scale=3)
            reset_btn = gr.Button("Reset", variant="secondary", scale=1)
        out_image = gr.Image(label="Result", type="pil", interactive=False)
        description_tb = gr.Textbox(label="Description", interactive=False)

        def _on_click(
            subject: Image.Image | None,
            garment: Image.Image | None,
            background: str,
            detailed: bool,
        ) -> tuple[Image.Image | None, str, str]:
            return _run_tryon(subject, garment, background, detailed, api_url)

        tryon_btn.click(
            fn=lambda: _format_status("Generating…", "info"),
            outputs=[status_html],
        ).then(
            fn=_on_click,
            inputs=[subject_img, garment_img, background_tb, detailed_cb],
            outputs=[out_image, description_tb, status_html],
        )

        reset_btn.click(
            fn=_reset_form,
            outputs=[
                subject_img,
                garment_img,
                background_tb,
                detailed_cb,
                out_image,
                description_tb,
                status_html,
            ],
        )

        def _on_input_change() -> str:
            # Clear the previous error when a new file is selected
            return _format_status("", "idle")

        subject_img.change(fn=_on_input_change, outputs=[status_html])
        garment_img.change(fn=_on_input_change, outputs=[status_html])

    return app


def launch(
    server_name: str | None = None,
    server_port: int | None = None,
    share: bool = False,
    api_url: str | None = None,
) -> None:
    """
    Build the Gradio app and launch the server.

    Args:
        server_name: Host to bind (default: TRYON_UI_HOST or 127.0.0.1).
        server_port: Port (default: TRYON_UI_PORT or 7860).
        share: If True, create a public share link (e.g. gradio.live).
        api_url: Base URL of the tryon API (default: TRYON_API_URL or http://127.0.0.1:8000).
    """
    host = server_name or os.getenv("TRYON_UI_HOST", DEFAULT_UI_HOST)
    port = server_port
    if port is None:
        try:
            port = int(os.getenv("TRYON_UI_PORT", str(DEFAULT_UI_PORT)))
        except ValueError:
            port = DEFAULT_UI_PORT
    api = api_url or os.getenv("TRYON_API_URL", DEFAULT_API_URL)
    print(f"tryon ui is starting (v{__version__}) on http://{host}:{port} using API {api}...")
    app = _build_blocks(api)
    app.launch(server_name=host, server_port=port, share=share, inbrowser=True)


def main() -> None:
    """Entry point for the tryon-ui console script. Parses --port, --host, --share, --api-url."""
    parser = argparse.ArgumentParser(
        description="Launch the tryon Gradio web UI.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        metavar="PORT",
        help=f"Port to bind (default: TRYON_UI_PORT or {DEFAULT_UI_PORT}).",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        metavar="HOST",
        help=f"Host to bind (default: TRYON_UI_HOST or {DEFAULT_UI_HOST}). Use 0.0.0.0 for LAN.",
    )
    parser.add_argument(
        "--share",
        action="store_true",
        default=None,
        help="Create a public share link (e.g. gradio.live). Overrides TRYON_UI_SHARE.",
    )
    parser.add_argument(
        "--api-url",
        type=str,
        default=None,
        metavar="URL",
        help=f"Base URL of the tryon API (default: TRYON_API_URL or {DEFAULT_API_URL}).",
    )
    args = parser.parse_args()
    share_val = args.share
    if share_val is None:
        env_share = os.environ.get("TRYON_UI_SHARE", "").lower()
        share_val = env_share in ("1", "true", "yes")
    launch(
        server_name=args.host,
        server_port=args.port,
        share=share_val,
        api_url=args.api_url,
    )
