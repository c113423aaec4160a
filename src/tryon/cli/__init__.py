"""
Command-line interface for tryon.

This package contains CLI implementations using Click.
Commands: run (one-off generation), serve (HTTP API) and ui (Gradio).
"""

from tryon.cli.commands import cli, main

__all__ = ["cli", "main"]
