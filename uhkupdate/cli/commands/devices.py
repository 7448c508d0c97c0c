"""Device listing command."""

import json
from typing import Annotated

import typer

from uhkupdate.cli.decorators import handle_errors
from uhkupdate.cli.helpers import (
    get_icon_mode_from_context,
    get_themed_console,
    print_device_table,
)


@handle_errors
def devices(
    ctx: typer.Context,
    output_json: Annotated[
        bool, typer.Option("--json", help="Print devices as JSON")
    ] = False,
) -> None:
    """List attached compatible keyboards."""
    from uhkupdate.device import create_device_discovery

    icon_mode = get_icon_mode_from_context(ctx)
    found = create_device_discovery().list_devices()

    if output_json:
        payload = [
            {
                "variant": device.name,
                "model": device.display_name,
                "bootloader_mode": device.bootloader_mode,
                "serial_number": device.serial_number,
            }
            for device in found
        ]
        print(json.dumps(payload, indent=2))
        return

    if not found:
        get_themed_console(icon_mode).print_warning("No compatible keyboard attached")
        return

    print_device_table(found, icon_mode)


def register_commands(app: typer.Typer) -> None:
    """Register device commands with the main app."""
    app.command(name="devices")(devices)
