"""Boundary validation shared by the job and resume contracts."""

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from services.errors import InvalidInput


class RecordModel(BaseModel):
    """Immutable domain record validated once at the system boundary."""

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_record(cls, data: dict[str, Any]):
        """Validate a loosely-typed record, raising InvalidInput on failure."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidInput(f"Invalid {cls.__name__} record: {e}") from e
