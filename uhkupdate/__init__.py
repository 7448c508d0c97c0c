"""uhkupdate - UHK keyboard factory update tool."""

from importlib.metadata import PackageNotFoundError, version

from .firmware.models import RunOutcome, UpdatePlan, UpdateResult


try:
    __version__ = version(__package__ or "uhkupdate")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "RunOutcome",
    "UpdatePlan",
    "UpdateResult",
    "__version__",
]
