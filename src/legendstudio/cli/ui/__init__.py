"""CLI UI components for Legend Studio."""

from .console import (
    console,
    print_error,
    print_header,
    print_info,
    print_key_value_table,
    print_muted,
    print_success,
    print_toast,
    print_warning,
)
from .progress import create_progress, spinner
from .setup import configure_logging, open_session, run_setup_check

__all__ = [
    "configure_logging",
    "console",
    "create_progress",
    "open_session",
    "print_error",
    "print_header",
    "print_info",
    "print_key_value_table",
    "print_muted",
    "print_success",
    "print_toast",
    "print_warning",
    "run_setup_check",
    "spinner",
]
