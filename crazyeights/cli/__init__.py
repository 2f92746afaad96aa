"""Command-line interface for Crazy Eights."""

from .main import app, main

__all__ = ["app", "main"]
