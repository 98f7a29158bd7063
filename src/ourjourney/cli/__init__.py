"""Command line interface."""

from ourjourney.cli.main import ourjourney

__all__ = ["ourjourney"]
