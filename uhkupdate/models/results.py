"""Base result model for cross-domain operations."""

from datetime import datetime

from pydantic import Field, field_validator, model_validator

from uhkupdate.core.structlog_logger import get_struct_logger
from uhkupdate.models.base import UhkBaseModel


logger = get_struct_logger(__name__)


class BaseResult(UhkBaseModel):
    """Base class for all operation results."""

    success: bool
    timestamp: datetime = Field(default_factory=datetime.now)
    messages: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_success_consistency(self) -> "BaseResult":
        """Ensure success flag is consistent with errors."""
        if self.errors and self.success:
            logger.warning("result_success_mismatch", error_count=len(self.errors))
            object.__setattr__(self, "success", False)
        return self

    @field_validator("messages", "errors")
    @classmethod
    def validate_message_lists(cls, v: list[str]) -> list[str]:
        """Validate that message lists contain only strings."""
        for item in v:
            if not isinstance(item, str):
                raise ValueError("All messages and errors must be strings")
        return v

    def add_message(self, message: str) -> None:
        """Add an informational message."""
        self.messages.append(message)
        logger.debug("result_message_added", message=message)

    def add_error(self, error: str) -> None:
        """Add an error message and mark the result failed."""
        self.errors.append(error)
        self.success = False


__all__ = ["BaseResult"]
