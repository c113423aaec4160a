"""
Rich output for the tryon CLI.

Everything here writes to stderr; stdout carries only the saved file path.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from tryon.core.result import GenerationFailure

console = Console(stderr=True)

_MODEL_DISPLAY_MAX = 40


def _short_model(model: str) -> str:
    if len(model) <= _MODEL_DISPLAY_MAX:
        return model
    return model[: _MODEL_DISPLAY_MAX - 3] + "..."


def _details_table() -> Table:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", justify="right", vertical="top")
    table.add_column(style="white")
    return table


@contextmanager
def generation_progress(model: str | None = None, prompt_type: str | None = None) -> Iterator[None]:
    """Spinner with elapsed time while the Gemini call is in flight; removed when done."""
    label = "Dressing subject in garment"
    if model:
        label += f" [dim]({escape(_short_model(model))})[/dim]"
    if prompt_type:
        label += f" • [dim green]{prompt_type} prompt[/dim green]"

    with Progress(
        SpinnerColumn(spinner_name="dots"),
        TextColumn("[green]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(label, total=None)
        yield


def print_success_result(
    output_path: Path,
    elapsed: float,
    model_used: str,
    prompt_type: str,
    background: str,
    description: str,
) -> None:
    """
    Print the saved path and request summary in a green panel.

    Args:
        output_path: Where the generated image was written
        elapsed: Wall time of the request in seconds
        model_used: Gemini model that produced the image
        prompt_type: "detailed" or "concise"
        background: Caller's background preference, or the default label
        description: Text the model returned with the image
    """
    table = _details_table()
    table.add_row("Saved to", f"[bold green]{escape(str(output_path))}[/bold green]")
    table.add_row("Model", escape(model_used))
    table.add_row("Time", f"{elapsed:.1f}s")
    table.add_row("Prompt", prompt_type)
    table.add_row("Background", escape(background))
    table.add_row("Description", f"[dim]{escape(description)}[/dim]")

    console.print()
    console.print(
        Panel(
            table,
            title="[bold green]✓ Try-on ready[/bold green]",
            border_style="green",
            padding=(1, 2),
        )
    )


def print_failure_result(failure: GenerationFailure) -> None:
    """Print a classified generation failure in a red panel."""
    table = _details_table()
    table.add_row("Reason", failure.kind.value.replace("_", " "))
    table.add_row("Error", f"[bold red]{escape(failure.message)}[/bold red]")
    if failure.details:
        table.add_row("Details", escape(failure.details))
    if failure.text_response:
        table.add_row("Model said", f"[dim]{escape(failure.text_response)}[/dim]")

    console.print()
    console.print(
        Panel(
            table,
            title="[bold red]✗ Try-on failed[/bold red]",
            border_style="red",
            padding=(1, 2),
        )
    )


def print_info(message: str) -> None:
    console.print(f"[cyan]ℹ[/cyan] {escape(message)}")


def print_error(message: str) -> None:
    console.print(f"[red]✗[/red] {escape(message)}")
