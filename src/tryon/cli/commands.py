"""
Click command definitions for the tryon CLI.

This module contains the Click command group and all CLI commands
(run, serve, ui).
"""

import asyncio
import os
from pathlib import Path

import click

from tryon import (
    GARMENT,
    SUBJECT,
    Config,
    GeminiAdapter,
    GenerationFailure,
    GenerationPreferences,
    ImageAsset,
    __version__,
    run_tryon,
)
from tryon.cli import progress
from tryon.cli.handlers import exit_with_failure, run_with_error_handling
from tryon.cli.utils import default_output_path, sniff_mime_type
from tryon.core.encoder import parse_image_data_url
from tryon.logging_config import configure_logging, get_verbosity_from_env

DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 8000


@click.group(
    help=f"""AI virtual try-on: dress a person photo in a garment photo (Gemini).

\b
Version: {__version__}
"""
)
@click.version_option(version=__version__, package_name="tryon")
@click.pass_context
def cli(ctx: click.Context) -> None:
    ctx.color = True


def _load_asset(path: Path, role: str) -> ImageAsset:
    data = path.read_bytes()
    return ImageAsset.from_bytes(data, sniff_mime_type(data), role=role)


@cli.command()
@click.argument("subject", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("garment", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--background", "-b", help="Background description (default: neutral studio).")
@click.option("--concise", is_flag=True, help="Use the concise instruction template.")
@click.option("--out", "-o", type=click.Path(path_type=Path), help="Output file path.")
@click.option("--model", "-m", help="Gemini model ID (default from config).")
@click.option(
    "--api-key",
    envvar="GEMINI_API_KEY",
    help="Gemini API key (overrides GEMINI_API_KEY environment variable).",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Minimize progress messages; only print result path or errors.",
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help="Increase verbosity: -v also show the prompt, -vv show API detail.",
)
@click.option(
    "--debug-api",
    is_flag=True,
    help="Log the request/reply structure (image data truncated) for debugging.",
)
def run(
    subject: Path,
    garment: Path,
    background: str | None,
    concise: bool,
    out: Path | None,
    model: str | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Dress the person in SUBJECT with the clothing in GARMENT and save the result."""
    verbose_level = min(verbose_count, 2) if verbose_count > 0 else get_verbosity_from_env()
    configure_logging(verbose_level=verbose_level, quiet=quiet)

    def do_run() -> None:
        # 1. Config
        config = Config.from_env()
        if api_key is not None:
            config.gemini_api_key = api_key
        if model:
            config.model = model
        if debug_api:
            config.debug_api = True
        config.validate()

        # 2. Inputs
        subject_asset = _load_asset(subject, SUBJECT)
        garment_asset = _load_asset(garment, GARMENT)
        preferences = GenerationPreferences(
            background=(background or "").strip() or None,
            detailed=not concise,
        )

        # 3. Generate
        adapter = GeminiAdapter(config)
        pipeline = run_tryon(subject_asset, garment_asset, preferences, adapter)
        if not quiet:
            progress.print_info(
                f"Subject {subject.name} ({subject_asset.mime_type}), "
                f"garment {garment.name} ({garment_asset.mime_type})"
            )
            with progress.generation_progress(
                model=config.model, prompt_type=preferences.prompt_type
            ):
                outcome = asyncio.run(pipeline)
        else:
            outcome = asyncio.run(pipeline)

        result = outcome.result
        if isinstance(result, GenerationFailure):
            exit_with_failure(result, quiet=quiet)

        # 4. Save
        image_bytes, mime_type = parse_image_data_url(result.image_data_url)
        out_path = out if out is not None else Path(default_output_path(mime_type))
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(image_bytes)

        # 5. Print result
        if not quiet:
            progress.print_success_result(
                output_path=out_path,
                elapsed=outcome.elapsed,
                model_used=outcome.model,
                prompt_type=outcome.instruction.prompt_type,
                background=outcome.metadata["backgroundPreference"],
                description=result.description,
            )
        # Path on stdout for scriptability
        click.echo(str(out_path))

    run_with_error_handling(do_run, quiet=quiet)


@cli.command()
@click.option(
    "--host",
    "host",
    type=str,
    default=None,
    envvar="TRYON_API_HOST",
    help=f"Host to bind (default: {DEFAULT_API_HOST} or TRYON_API_HOST).",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    envvar="TRYON_API_PORT",
    help=f"Port for the API server (default: {DEFAULT_API_PORT} or TRYON_API_PORT).",
)
@click.option("--reload", is_flag=True, help="Reload on code changes (development).")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Run the HTTP API (POST /api/tryon) with uvicorn."""
    import uvicorn

    configure_logging(verbose_level=get_verbosity_from_env(), quiet=False)
    uvicorn.run(
        "tryon.api:create_app",
        factory=True,
        host=host or DEFAULT_API_HOST,
        port=port or DEFAULT_API_PORT,
        reload=reload,
    )


@cli.command()
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    envvar="TRYON_UI_PORT",
    help="Port for the Gradio server (default: 7860 or TRYON_UI_PORT).",
)
@click.option(
    "--host",
    "host",
    type=str,
    default=None,
    envvar="TRYON_UI_HOST",
    help="Host to bind (default: 127.0.0.1 or TRYON_UI_HOST). Use 0.0.0.0 for LAN.",
)
@click.option(
    "--share",
    is_flag=True,
    default=None,
    help="Create a public share link (e.g. gradio.live).",
)
@click.option(
    "--api-url",
    envvar="TRYON_API_URL",
    default=None,
    help="Base URL of the tryon API (default: http://127.0.0.1:8000 or TRYON_API_URL).",
)
def ui(port: int | None, host: str | None, share: bool | None, api_url: str | None) -> None:
    """Launch the Gradio web UI (talks to a running `tryon serve`)."""
    from tryon.ui.gradio_app import launch as launch_ui

    configure_logging(verbose_level=get_verbosity_from_env(), quiet=False)

    # Resolve env for share: env var "1" or "true" => True
    share_val = share
    if share_val is None:
        env_share = os.environ.get("TRYON_UI_SHARE", "").lower()
        share_val = env_share in ("1", "true", "yes")
    launch_ui(server_name=host, server_port=port, share=share_val, api_url=api_url)


def main() -> None:
    """Entry point for the tryon console script."""
    cli()


__all__ = ["cli", "main", "run", "serve", "ui"]
