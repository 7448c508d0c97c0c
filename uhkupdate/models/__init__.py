"""Shared model base classes."""

from .base import UhkBaseModel, UhkFrozenModel
from .results import BaseResult


__all__ = ["BaseResult", "UhkBaseModel", "UhkFrozenModel"]
