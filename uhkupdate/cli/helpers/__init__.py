"""CLI output helpers."""

from .output import (
    get_icon_mode_from_context,
    print_device_table,
    print_info_message,
    print_outcome,
    print_plan_table,
    print_state,
)
from .theme import Colors, Icons, TableStyles, ThemedConsole, get_themed_console


__all__ = [
    "Colors",
    "Icons",
    "TableStyles",
    "ThemedConsole",
    "get_icon_mode_from_context",
    "get_themed_console",
    "print_device_table",
    "print_info_message",
    "print_outcome",
    "print_plan_table",
    "print_state",
]
