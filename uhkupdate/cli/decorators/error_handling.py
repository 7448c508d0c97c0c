"""Error handling decorators for CLI commands."""

import logging
import sys
import traceback
from collections.abc import Callable
from functools import wraps
from typing import Any

import typer

from uhkupdate.core.errors import (
    ConfigError,
    DeviceOperationError,
    DiscoveryError,
    PreconditionError,
    ResolutionError,
)
from uhkupdate.core.structlog_logger import get_struct_logger
from uhkupdate.firmware.models import ExitCode


__all__ = ["handle_errors", "print_stack_trace_if_verbose"]

logger = get_struct_logger(__name__)

# Checked in order; subclasses before their bases
ERROR_EXIT_CODES: tuple[tuple[type[Exception], str, ExitCode], ...] = (
    (PreconditionError, "precondition_failed", ExitCode.PRECONDITION_FAILED),
    (DiscoveryError, "discovery_error", ExitCode.RESOLUTION_FAILED),
    (ResolutionError, "resolution_error", ExitCode.RESOLUTION_FAILED),
    (DeviceOperationError, "device_error", ExitCode.DEVICE_FAILED),
    (ConfigError, "configuration_error", ExitCode.CONFIG_FAILED),
)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator mapping uncaught exceptions of a command to exit codes.

    Args:
        func: The function to decorate

    Returns:
        Decorated function with error handling
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except Exception as e:
            for error_type, event, exit_code in ERROR_EXIT_CODES:
                if isinstance(e, error_type):
                    logger.error(event, error=str(e))
                    print(f"Error: {e}", file=sys.stderr)
                    print_stack_trace_if_verbose()
                    raise typer.Exit(int(exit_code)) from e

            exc_info = logging.getLogger().isEnabledFor(logging.DEBUG)
            logger.error("unexpected_error", error=str(e), exc_info=exc_info)
            print(f"Unexpected error: {e}", file=sys.stderr)
            print_stack_trace_if_verbose()
            raise typer.Exit(int(ExitCode.RESOLUTION_FAILED)) from e

    return wrapper


def print_stack_trace_if_verbose() -> None:
    """Print stack trace if verbose/debug mode is enabled."""
    if any(arg in sys.argv for arg in ["-v", "-vv", "--verbose", "--debug"]):
        print("\nStack trace:", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
