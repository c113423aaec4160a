"""
Error handling for the CLI.

Maps exceptions and pipeline failures to exit codes and user messages.
"""

import sys
from collections.abc import Callable
from typing import NoReturn

import click

from tryon import (
    ConfigurationError,
    FailureKind,
    GenerationFailure,
    TryonError,
    ValidationError,
)
from tryon.cli import progress
from tryon.cli.utils import EXIT_UPSTREAM, EXIT_VALIDATION_OR_CONFIG


def map_exception_to_exit(exc: BaseException) -> tuple[int, str]:
    """Map library and known exceptions to (exit_code, user_message)."""
    if isinstance(exc, ValidationError):
        msg = exc.args[0] if exc.args else "Validation failed."
        if getattr(exc, "field", None):
            msg = f"{msg} (field: {exc.field})"
        return (EXIT_VALIDATION_OR_CONFIG, msg)
    if isinstance(exc, ConfigurationError):
        return (EXIT_VALIDATION_OR_CONFIG, exc.args[0] if exc.args else "Invalid configuration.")
    if isinstance(exc, TryonError):
        return (EXIT_UPSTREAM, exc.args[0] if exc.args else "An error occurred.")
    return (EXIT_UPSTREAM, str(exc) if exc.args else "An unexpected error occurred.")


def map_failure_to_exit(failure: GenerationFailure) -> tuple[int, str]:
    """Map a classified generation failure to (exit_code, user_message)."""
    msg = failure.message
    if failure.details:
        msg = f"{msg}: {failure.details}"
    if failure.kind is FailureKind.NO_IMAGE_PRODUCED and failure.text_response:
        msg = f"{msg}\nModel said: {failure.text_response}"
    return (EXIT_UPSTREAM, msg)


def _emit(msg: str, quiet: bool) -> None:
    if quiet:
        click.echo(msg, err=True)
    else:
        progress.print_error(msg)


def exit_with_failure(failure: GenerationFailure, *, quiet: bool = False) -> NoReturn:
    """Print the failure and exit with its code."""
    code, msg = map_failure_to_exit(failure)
    if quiet:
        click.echo(msg, err=True)
    else:
        progress.print_failure_result(failure)
    sys.exit(code)


def run_with_error_handling(
    fn: Callable[[], None],
    *,
    quiet: bool = False,
    debug: bool = False,
) -> None:
    """
    Run fn(); on exception map to exit code and message, print and sys.exit.
    Used so the command flow stays free of try/except for known errors.
    """
    try:
        fn()
    except (ValidationError, ConfigurationError, TryonError, OSError) as e:
        code, msg = map_exception_to_exit(e)
        _emit(msg, quiet)
        sys.exit(code)
    except Exception as e:
        if debug:
            raise
        code, msg = map_exception_to_exit(e)
        _emit(msg, quiet)
        sys.exit(code)


__all__ = [
    "exit_with_failure",
    "map_exception_to_exit",
    "map_failure_to_exit",
    "run_with_error_handling",
]
