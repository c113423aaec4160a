"""Gradio web UI for tryon."""
