"""Helpers for CLI commands."""

from kiln.cli.helpers.output import (
    print_diagnostic,
    print_error_message,
    print_list_item,
    print_matrix,
    print_phase_result,
    print_success_message,
)


__all__ = [
    "print_diagnostic",
    "print_error_message",
    "print_list_item",
    "print_matrix",
    "print_phase_result",
    "print_success_message",
]
