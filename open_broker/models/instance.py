"""Service instance request and response models."""

from pydantic import Field
from typing import Dict, Any, Optional

from open_broker.models.base import WireModel
from open_broker.models.catalog import MaintenanceInfo
from open_broker.models.service_broker import (
    AsyncParameterizedServiceBrokerRequest, AsyncServiceBrokerRequest,
    AsyncServiceBrokerResponse, OperationState, ServiceBrokerRequest
)


class ServiceInstanceMetadata(WireModel):
    """Labels and attributes reported for a service instance."""
    labels: Optional[Dict[str, Any]] = None
    attributes: Optional[Dict[str, Any]] = None


class CreateServiceInstanceRequest(AsyncParameterizedServiceBrokerRequest):
    """Service instance provisioning request."""
    service_definition_id: str = Field(..., alias='service_id', description="ID of the service being provisioned")
    plan_id: str = Field(..., description="ID of the plan being provisioned")
    organization_guid: Optional[str] = None
    space_guid: Optional[str] = None
    maintenance_info: Optional[MaintenanceInfo] = None

    service_instance_id: Optional[str] = Field(default=None, exclude=True)


class CreateServiceInstanceResponse(AsyncServiceBrokerResponse):
    """Service instance provisioning response.

    ``instance_existed`` marks an idempotent create of an identical instance.
    """
    dashboard_url: Optional[str] = None
    metadata: Optional[ServiceInstanceMetadata] = None
    instance_existed: bool = Field(default=False, exclude=True)


class PreviousValues(WireModel):
    """Instance attributes before an update."""
    service_definition_id: Optional[str] = Field(default=None, alias='service_id')
    plan_id: Optional[str] = None
    organization_id: Optional[str] = None
    space_id: Optional[str] = None
    maintenance_info: Optional[MaintenanceInfo] = None


class UpdateServiceInstanceRequest(AsyncParameterizedServiceBrokerRequest):
    """Service instance update request."""
    service_definition_id: str = Field(..., alias='service_id', description="ID of the service")
    plan_id: Optional[str] = None
    previous_values: Optional[PreviousValues] = None
    maintenance_info: Optional[MaintenanceInfo] = None

    service_instance_id: Optional[str] = Field(default=None, exclude=True)


class UpdateServiceInstanceResponse(AsyncServiceBrokerResponse):
    """Service instance update response."""
    dashboard_url: Optional[str] = None
    metadata: Optional[ServiceInstanceMetadata] = None


class DeleteServiceInstanceRequest(AsyncServiceBrokerRequest):
    """Service instance deprovisioning request."""
    service_instance_id: str
    service_definition_id: str
    plan_id: str


class DeleteServiceInstanceResponse(AsyncServiceBrokerResponse):
    """Service instance deprovisioning response."""


class GetServiceInstanceRequest(ServiceBrokerRequest):
    """Fetch a service instance."""
    service_instance_id: str
    service_definition_id: Optional[str] = None
    plan_id: Optional[str] = None


class GetServiceInstanceResponse(WireModel):
    """Fetched service instance."""
    service_definition_id: Optional[str] = Field(default=None, alias='service_id')
    plan_id: Optional[str] = None
    dashboard_url: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None
    maintenance_info: Optional[MaintenanceInfo] = None
    metadata: Optional[ServiceInstanceMetadata] = None


class GetLastServiceOperationRequest(ServiceBrokerRequest):
    """Poll the last operation on a service instance."""
    service_instance_id: str
    service_definition_id: Optional[str] = None
    plan_id: Optional[str] = None
    operation: Optional[str] = None


class GetLastServiceOperationResponse(WireModel):
    """Last operation status response.

    ``delete_operation`` tells the protocol layer a successful state belongs
    to a deprovision; it is not sent on the wire.
    """
    state: OperationState = Field(..., description="State of the operation")
    description: Optional[str] = None
    instance_usable: Optional[bool] = None
    update_repeatable: Optional[bool] = None
    delete_operation: bool = Field(default=False, exclude=True)
