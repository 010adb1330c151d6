"""Command-line interface for Kiln."""

from kiln.cli.app import app, main
from kiln.cli.commands import register_all_commands


register_all_commands(app)

__all__ = ["app", "main"]
