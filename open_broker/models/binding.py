"""Service binding request and response models."""

from pydantic import ConfigDict, Field
from typing import Dict, Any, Optional, List
from enum import Enum

from open_broker.models.base import WireModel
from open_broker.models.service_broker import (
    AsyncParameterizedServiceBrokerRequest, AsyncServiceBrokerRequest,
    AsyncServiceBrokerResponse, OperationState, ServiceBrokerRequest
)


class BindingStatus(str, Enum):
    """Outcome of a create binding call with respect to existing bindings."""
    NEW = "new"
    EXISTS_WITH_IDENTICAL_PARAMETERS = "exists_with_identical_parameters"
    EXISTS_WITH_DIFFERENT_PARAMETERS = "exists_with_different_parameters"


class BindResource(WireModel):
    """Resource the binding is created for."""

    model_config = ConfigDict(populate_by_name=True, extra='allow')

    app_guid: Optional[str] = None
    route: Optional[str] = None


class BindingMetadata(WireModel):
    """Lifetime metadata of a binding."""
    expires_at: Optional[str] = None
    renew_before: Optional[str] = None


class VolumeMode(str, Enum):
    READ_ONLY = "r"
    READ_WRITE = "rw"


class SharedVolumeDevice(WireModel):
    """Shared volume device description."""
    volume_id: str
    mount_config: Optional[Dict[str, Any]] = None


class VolumeMount(WireModel):
    """Volume the application should mount."""
    driver: str
    container_dir: str
    mode: VolumeMode
    device_type: str = "shared"
    device: SharedVolumeDevice


class EndpointProtocol(str, Enum):
    TCP = "tcp"
    UDP = "udp"
    ALL = "all"


class Endpoint(WireModel):
    """Network endpoint exposed to the bound application."""
    host: str
    ports: List[str]
    protocol: Optional[EndpointProtocol] = None


class CreateServiceInstanceBindingRequest(AsyncParameterizedServiceBrokerRequest):
    """Service binding creation request."""
    service_definition_id: str = Field(..., alias='service_id', description="ID of the service")
    plan_id: str = Field(..., description="ID of the plan")
    app_guid: Optional[str] = None
    bind_resource: Optional[BindResource] = None

    service_instance_id: Optional[str] = Field(default=None, exclude=True)
    binding_id: Optional[str] = Field(default=None, exclude=True)


class CreateServiceInstanceBindingResponse(AsyncServiceBrokerResponse):
    """Service binding creation response.

    ``binding_existed`` and ``binding_status`` report idempotent creates; both
    drive the HTTP status only.
    """
    metadata: Optional[BindingMetadata] = None
    binding_existed: bool = Field(default=False, exclude=True)
    binding_status: Optional[BindingStatus] = Field(default=None, exclude=True)


class CreateServiceInstanceAppBindingResponse(CreateServiceInstanceBindingResponse):
    """Binding that hands credentials to an application."""
    credentials: Optional[Dict[str, Any]] = None
    syslog_drain_url: Optional[str] = None
    volume_mounts: Optional[List[VolumeMount]] = None
    endpoints: Optional[List[Endpoint]] = None


class CreateServiceInstanceRouteBindingResponse(CreateServiceInstanceBindingResponse):
    """Binding that routes traffic through a route service."""
    route_service_url: Optional[str] = None


class GetServiceInstanceBindingRequest(ServiceBrokerRequest):
    """Fetch a service binding."""
    service_instance_id: str
    binding_id: str
    service_definition_id: Optional[str] = None
    plan_id: Optional[str] = None


class GetServiceInstanceBindingResponse(WireModel):
    """Fetched service binding."""
    parameters: Optional[Dict[str, Any]] = None
    metadata: Optional[BindingMetadata] = None


class GetServiceInstanceAppBindingResponse(GetServiceInstanceBindingResponse):
    credentials: Optional[Dict[str, Any]] = None
    syslog_drain_url: Optional[str] = None
    volume_mounts: Optional[List[VolumeMount]] = None
    endpoints: Optional[List[Endpoint]] = None


class GetServiceInstanceRouteBindingResponse(GetServiceInstanceBindingResponse):
    route_service_url: Optional[str] = None


class DeleteServiceInstanceBindingRequest(AsyncServiceBrokerRequest):
    """Service binding deletion request."""
    service_instance_id: str
    binding_id: str
    service_definition_id: str
    plan_id: str


class DeleteServiceInstanceBindingResponse(AsyncServiceBrokerResponse):
    """Service binding deletion response."""


class GetLastServiceBindingOperationRequest(ServiceBrokerRequest):
    """Poll the last operation on a service binding."""
    service_instance_id: str
    binding_id: str
    service_definition_id: Optional[str] = None
    plan_id: Optional[str] = None
    operation: Optional[str] = None


class GetLastServiceBindingOperationResponse(WireModel):
    """Last binding operation status response."""
    state: OperationState = Field(..., description="State of the operation")
    description: Optional[str] = None
    delete_operation: bool = Field(default=False, exclude=True)
