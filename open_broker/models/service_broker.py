"""Request and response bases shared by instance and binding operations."""

from pydantic import ConfigDict, Field, field_validator
from typing import Dict, Any, Optional
from enum import Enum

from open_broker.exceptions import MAX_OPERATION_LENGTH
from open_broker.models.base import WireModel
from open_broker.models.catalog import ServiceDefinition, Plan
from open_broker.models.context import Context, context_from_wire


class OperationState(str, Enum):
    """State of an asynchronous operation."""
    IN_PROGRESS = "in progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ServiceBrokerRequest(WireModel):
    """Fields attached to every operation request by the protocol layer.

    None of these travel in the request body; they come from the path and
    the request headers.
    """

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    platform_instance_id: Optional[str] = Field(default=None, exclude=True)
    api_info_location: Optional[str] = Field(default=None, exclude=True)
    originating_identity: Optional[Context] = Field(default=None, exclude=True)
    request_identity: Optional[str] = Field(default=None, exclude=True)

    service_definition: Optional[ServiceDefinition] = Field(default=None, exclude=True)
    plan: Optional[Plan] = Field(default=None, exclude=True)


class AsyncServiceBrokerRequest(ServiceBrokerRequest):
    """Request for an operation the broker may complete asynchronously."""
    async_accepted: bool = Field(default=False, exclude=True)


class AsyncParameterizedServiceBrokerRequest(AsyncServiceBrokerRequest):
    """Asynchronous request carrying opaque parameters and a platform context."""
    parameters: Optional[Dict[str, Any]] = None
    context: Optional[Context] = None

    @field_validator('context', mode='before')
    @classmethod
    def parse_context(cls, v):
        """Dispatch the body context onto its platform variant."""
        if v is None:
            return v
        return context_from_wire(v)

    def get_parameter(self, key: str, default: Any = None) -> Any:
        return (self.parameters or {}).get(key, default)


class AsyncServiceBrokerResponse(WireModel):
    """Response that may report an operation still running.

    ``async_`` drives the HTTP status and is never serialized.
    """
    async_: bool = Field(default=False, alias='async', exclude=True)
    operation: Optional[str] = None

    @field_validator('operation')
    @classmethod
    def validate_operation_length(cls, v):
        """Operation tokens are bounded in length."""
        if v is not None and len(v) > MAX_OPERATION_LENGTH:
            raise ValueError(f"operation strings are restricted to {MAX_OPERATION_LENGTH:,} characters")
        return v
