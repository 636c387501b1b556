"""Error document models."""

from pydantic import Field, field_validator
from typing import Optional

from open_broker.exceptions import MAX_OPERATION_LENGTH
from open_broker.models.base import WireModel


class ErrorMessage(WireModel):
    """Error response document."""
    error: Optional[str] = Field(default=None, description="Stable machine-readable error code")
    description: str = Field(..., description="Human-readable error description")


class OperationInProgressMessage(WireModel):
    """Body returned when a create, update or delete is still in progress."""
    operation: Optional[str] = None

    @field_validator('operation')
    @classmethod
    def validate_operation_length(cls, v):
        """Operation tokens are bounded in length."""
        if v is not None and len(v) > MAX_OPERATION_LENGTH:
            raise ValueError(f"operation strings are restricted to {MAX_OPERATION_LENGTH:,} characters")
        return v
