"""CLI command modules."""

import typer

from uhkupdate.cli.commands.devices import register_commands as register_device_commands
from uhkupdate.cli.commands.update import register_commands as register_update_commands


def register_all_commands(app: typer.Typer) -> None:
    """Register all CLI commands with the main app.

    Args:
        app: The main Typer app
    """
    register_update_commands(app)
    register_device_commands(app)
