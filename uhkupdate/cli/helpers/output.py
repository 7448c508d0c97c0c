"""Helper functions for CLI output formatting with Rich integration."""

import typer
from rich.markup import escape

from uhkupdate.cli.helpers.theme import Icons, TableStyles, get_themed_console
from uhkupdate.firmware.models import (
    DeviceVariant,
    FlashLeftStep,
    FlashRightStep,
    RunOutcome,
    SwitchKeymapStep,
    UpdatePlan,
    UpdateState,
    WriteHardwareConfigStep,
    WriteUserConfigStep,
)


def get_icon_mode_from_context(ctx: typer.Context) -> str:
    """Icon mode from the app context, defaulting to emoji."""
    app_ctx = getattr(ctx, "obj", None)
    return getattr(app_ctx, "icon_mode", "emoji")


def print_info_message(message: str, icon_mode: str = "emoji") -> None:
    get_themed_console(icon_mode).print_info(message)


def describe_step_argument(step: object) -> str:
    """Human-readable single argument of a planned step."""
    if isinstance(step, FlashRightStep | FlashLeftStep):
        return str(step.image_path)
    if isinstance(step, WriteUserConfigStep):
        return str(step.config_path)
    if isinstance(step, WriteHardwareConfigStep):
        return "ISO" if step.is_iso else "ANSI"
    if isinstance(step, SwitchKeymapStep):
        return step.keymap
    return ""


def print_plan_table(plan: UpdatePlan, icon_mode: str = "emoji") -> None:
    """Print the ordered steps of ``plan``."""
    table = TableStyles.create_plan_table(icon_mode)
    for index, step in enumerate(plan.steps, start=1):
        table.add_row(
            str(index), step.step.description, escape(describe_step_argument(step))
        )
    get_themed_console(icon_mode).console.print(table)


def print_device_table(devices: list[DeviceVariant], icon_mode: str = "emoji") -> None:
    """Print attached keyboards."""
    table = TableStyles.create_device_table(icon_mode)
    for device in devices:
        table.add_row(
            device.name,
            device.display_name,
            "bootloader" if device.bootloader_mode else "keyboard",
            escape(device.serial_number or "-"),
        )
    get_themed_console(icon_mode).console.print(table)


def print_state(state: UpdateState, icon_mode: str = "emoji") -> None:
    """Progress line for an orchestrator state transition."""
    if state in (UpdateState.IDLE, UpdateState.DONE, UpdateState.FAILED):
        return
    arrow = Icons.get_icon("ARROW", icon_mode)
    get_themed_console(icon_mode).console.print(f"{arrow} {state.value}", style="info")


def print_outcome(outcome: RunOutcome, icon_mode: str = "emoji") -> None:
    """Print the final summary of an update run."""
    console = get_themed_console(icon_mode)
    if outcome.success:
        if outcome.dry_run:
            console.print_success("Dry run completed, no device changes made")
        else:
            console.print_success("All done!")
        for message in outcome.messages:
            console.print_list_item(message)
        return

    console.print_error(outcome.cause or "Update failed")
    if outcome.failed_step is not None:
        console.print_list_item(f"Failed step: {outcome.failed_step.value}")
    if outcome.failed_check is not None:
        console.print_list_item(f"Failed check: {outcome.failed_check.value}")
