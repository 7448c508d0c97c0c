"""Main CLI application for uhkupdate."""

import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from typing import Annotated

import typer

from uhkupdate.cli.decorators.error_handling import print_stack_trace_if_verbose
from uhkupdate.core.errors import ConfigError
from uhkupdate.core.logging import setup_logging
from uhkupdate.firmware.models import ExitCode


__all__ = ["app", "main", "__version__", "setup_logging"]

try:
    __version__ = version("uhkupdate")
except PackageNotFoundError:
    __version__ = "0.0.0"

logger = logging.getLogger(__name__)


class AppContext:
    """Application context for storing shared state."""

    def __init__(
        self,
        verbose: int = 0,
        log_file: str | None = None,
        config_file: str | None = None,
        no_emoji: bool = False,
    ):
        """Initialize AppContext.

        Args:
            verbose: Verbosity level
            log_file: Path to log file
            config_file: Path to configuration file
            no_emoji: Whether to disable emoji icons

        Raises:
            ConfigError: If the configuration file is missing or invalid
        """
        self.verbose = verbose
        self.log_file = log_file
        self.config_file = config_file
        self.no_emoji = no_emoji

        from uhkupdate.config.user_config import create_user_config

        self.user_config = create_user_config(cli_config_path=config_file)

    @property
    def icon_mode(self) -> str:
        """Icon mode; the --no-emoji flag takes precedence over config."""
        if self.no_emoji:
            return "text"
        return self.user_config.config.icon_mode


app = typer.Typer(
    name="uhk-update",
    help=f"""UHK factory update tool v{__version__}

Flashes a firmware bundle onto an attached UHK keyboard and restores its
factory configuration:

Right unit firmware → Left module firmware → User config → Hardware config → Test keymap

Common workflows:
  • Update a keyboard:  uhk-update update ./firmware ansi
  • Preview the plan:   uhk-update plan ./firmware iso --variant uhk60v2-right
  • List keyboards:     uhk-update devices""",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity (-v=INFO, -vv=DEBUG)",
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging (equivalent to -vv)"),
    ] = False,
    log_file: Annotated[
        str | None, typer.Option("--log-file", help="Log to file (JSON lines)")
    ] = None,
    config_file: Annotated[
        str | None,
        typer.Option("-c", "--config", help="Path to configuration file"),
    ] = None,
    no_emoji: Annotated[
        bool,
        typer.Option("--no-emoji", help="Disable emoji icons in output"),
    ] = False,
    version: Annotated[
        bool, typer.Option("--version", help="Show version and exit")
    ] = False,
) -> None:
    """UHK factory update tool."""
    if version:
        print(f"uhk-update v{__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        print(ctx.get_help())
        raise typer.Exit()

    try:
        app_context = AppContext(
            verbose=verbose,
            log_file=log_file,
            config_file=config_file,
            no_emoji=no_emoji,
        )
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        raise typer.Exit(int(ExitCode.CONFIG_FAILED)) from e
    ctx.obj = app_context

    log_level = logging.WARNING
    if debug:
        log_level = logging.DEBUG
    elif verbose == 1:
        log_level = logging.INFO
    elif verbose >= 2:
        log_level = logging.DEBUG
    elif log_file is None:
        log_level = app_context.user_config.get_log_level_int()

    setup_logging(level=log_level, log_file=log_file)


def main() -> int:
    """Main CLI entry point."""
    exit_code = 0

    try:
        from uhkupdate.cli.commands import register_all_commands

        register_all_commands(app)

        app()

    except SystemExit as e:
        exit_code = e.code if isinstance(e.code, int) else 0

    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print_stack_trace_if_verbose()
        exit_code = int(ExitCode.RESOLUTION_FAILED)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
