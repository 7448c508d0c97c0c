"""Update and plan commands."""

from pathlib import Path
from typing import Annotated

import typer

from uhkupdate.cli.decorators import handle_errors
from uhkupdate.cli.helpers import (
    get_icon_mode_from_context,
    print_info_message,
    print_outcome,
    print_plan_table,
    print_state,
)
from uhkupdate.core.errors import PreconditionError
from uhkupdate.core.structlog_logger import get_struct_logger
from uhkupdate.firmware.models import ExitCode, RunOutcome, UpdateState


logger = get_struct_logger(__name__)

BundleArgument = Annotated[
    Path,
    typer.Argument(help="Firmware bundle directory or archive (.tar.gz, .zip)"),
]
LayoutArgument = Annotated[str, typer.Argument(help="Physical layout: ansi or iso")]
KeymapOption = Annotated[
    str | None,
    typer.Option(
        "--keymap",
        "-k",
        help="Keymap abbreviation activated after the update (default from config, TES)",
    ),
]


def _finish(outcome: RunOutcome, icon_mode: str) -> None:
    if outcome.plan is not None and (outcome.dry_run or not outcome.success):
        print_plan_table(outcome.plan, icon_mode)
    print_outcome(outcome, icon_mode)
    if outcome.exit_code != ExitCode.SUCCESS:
        raise typer.Exit(int(outcome.exit_code))


@handle_errors
def update(
    ctx: typer.Context,
    bundle: BundleArgument,
    layout: LayoutArgument,
    keymap: KeymapOption = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run", help="Discover, resolve and validate only; do not touch the device"
        ),
    ] = False,
) -> None:
    """Run the factory update on the attached keyboard.

    Flashes the right unit and the left module, restores the user and
    hardware configuration, and switches to the factory test keymap.

    \b
    Examples:
        uhk-update update ./firmware ansi
        uhk-update update firmware-9.0.0.tar.gz iso --dry-run
    """
    from uhkupdate.device import create_device_discovery, create_uhk_device_operations
    from uhkupdate.firmware import create_factory_update_service

    app_ctx = ctx.obj
    config = app_ctx.user_config.config
    icon_mode = get_icon_mode_from_context(ctx)

    def on_state(state: UpdateState) -> None:
        print_state(state, icon_mode)

    service = create_factory_update_service(
        discovery=create_device_discovery(),
        on_state=on_state,
        operations_factory=lambda: create_uhk_device_operations(config),
    )
    outcome = service.run(
        bundle,
        layout,
        keymap=keymap or config.update.keymap,
        dry_run=dry_run,
    )
    logger.debug(
        "update_command_finished",
        success=outcome.success,
        exit_code=int(outcome.exit_code),
    )
    _finish(outcome, icon_mode)


@handle_errors
def plan(
    ctx: typer.Context,
    bundle: BundleArgument,
    layout: LayoutArgument,
    variant: Annotated[
        str,
        typer.Option(
            "--variant", help="Device variant to plan for, e.g. uhk60v2-right"
        ),
    ],
    keymap: KeymapOption = None,
) -> None:
    """Resolve and validate a bundle and print the update plan.

    No keyboard needs to be attached.

    \b
    Examples:
        uhk-update plan ./firmware iso --variant uhk60v2-right
    """
    from uhkupdate.device import get_variant_by_name, variant_names
    from uhkupdate.firmware import create_factory_update_service

    config = ctx.obj.user_config.config
    icon_mode = get_icon_mode_from_context(ctx)

    device_variant = get_variant_by_name(variant)
    if device_variant is None:
        raise PreconditionError(
            "variant",
            f"Unknown device variant {variant!r}; "
            f"known variants: {', '.join(variant_names())}",
        )

    print_info_message(f"Planning for {device_variant.display_name}", icon_mode)
    service = create_factory_update_service()
    outcome = service.run_for_variant(
        device_variant,
        bundle,
        layout,
        keymap=keymap or config.update.keymap,
        dry_run=True,
    )
    _finish(outcome, icon_mode)


def register_commands(app: typer.Typer) -> None:
    """Register update commands with the main app.

    Args:
        app: The main Typer app
    """
    app.command(name="update")(update)
    app.command(name="plan")(plan)
