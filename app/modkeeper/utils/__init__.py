"""Utility modules for modkeeper.

This module exports commonly used utility functions.
"""

from modkeeper.utils.formatting import (
    console,
    create_table,
    err_console,
    format_tags,
    format_timestamp,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "create_table",
    "err_console",
    "format_tags",
    "format_timestamp",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
