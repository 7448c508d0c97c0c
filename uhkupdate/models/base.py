"""Base model for all uhkupdate Pydantic models."""

from pydantic import BaseModel, ConfigDict


class UhkBaseModel(BaseModel):
    """Base model class for all uhkupdate Pydantic models.

    Fields accept both their name and their alias, strings are stripped and
    assignments are validated.
    """

    model_config = ConfigDict(
        extra="allow",
        str_strip_whitespace=True,
        use_enum_values=False,
        validate_assignment=True,
        populate_by_name=True,
    )


class UhkFrozenModel(UhkBaseModel):
    """Immutable variant of UhkBaseModel for values that never change in a run."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )
