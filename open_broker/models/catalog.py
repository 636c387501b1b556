"""Service catalog data models."""

from pydantic import Field, field_validator
from typing import Dict, Any, Optional, List

from open_broker.models.base import WireModel


class MaintenanceInfo(WireModel):
    """Maintenance version of a plan."""
    version: str = Field(..., description="Semantic version of the plan's maintenance state")
    description: Optional[str] = None


class MethodSchema(WireModel):
    """JSON schema for the parameters of one operation."""
    parameters: Dict[str, Any] = Field(default_factory=dict)


class ServiceInstanceSchema(WireModel):
    """Parameter schemas for instance operations."""
    create: Optional[MethodSchema] = None
    update: Optional[MethodSchema] = None


class ServiceBindingSchema(WireModel):
    """Parameter schemas for binding operations."""
    create: Optional[MethodSchema] = None


class Schemas(WireModel):
    """Parameter schemas attached to a plan."""
    service_instance: Optional[ServiceInstanceSchema] = None
    service_binding: Optional[ServiceBindingSchema] = None


class DashboardClient(WireModel):
    """OAuth client used by a service dashboard."""
    id: str = Field(..., description="OAuth client id")
    secret: str = Field(..., description="OAuth client secret")
    redirect_uri: Optional[str] = None


class Plan(WireModel):
    """Service plan definition.

    ``bindable``, ``free`` and ``plan_updateable`` are tri-state: left unset
    they are omitted from the wire and the service-level value applies.
    """
    id: str = Field(..., description="Unique identifier for the service plan")
    name: str = Field(..., description="CLI-friendly name of the service plan")
    description: str = Field(..., description="Description of the service plan")
    metadata: Optional[Dict[str, Any]] = None
    free: Optional[bool] = None
    bindable: Optional[bool] = None
    plan_updateable: Optional[bool] = None
    schemas: Optional[Schemas] = None
    maintenance_info: Optional[MaintenanceInfo] = None
    maximum_polling_duration: Optional[int] = Field(default=None, ge=0)


class ServiceDefinition(WireModel):
    """Service offering advertised in the catalog."""
    id: str = Field(..., description="Unique identifier for the service")
    name: str = Field(..., description="CLI-friendly name of the service")
    description: str = Field(..., description="Description of the service")
    bindable: bool = Field(default=False, description="Whether the service supports binding")
    plans: List[Plan] = Field(..., description="Plans offered by the service")
    tags: Optional[List[str]] = None
    requires: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None
    dashboard_client: Optional[DashboardClient] = None
    plan_updateable: Optional[bool] = None
    instances_retrievable: Optional[bool] = None
    bindings_retrievable: Optional[bool] = None
    allow_context_updates: Optional[bool] = None

    @field_validator('plans')
    @classmethod
    def validate_plans(cls, v):
        """A service must offer at least one plan."""
        if not v:
            raise ValueError("a service definition must contain at least one plan")
        plan_ids = [plan.id for plan in v]
        if len(set(plan_ids)) != len(plan_ids):
            raise ValueError("plan ids must be unique within a service definition")
        return v

    def get_plan(self, plan_id: str) -> Optional[Plan]:
        """Find a plan of this service by id."""
        for plan in self.plans:
            if plan.id == plan_id:
                return plan
        return None


class Catalog(WireModel):
    """Service catalog response."""
    services: List[ServiceDefinition] = Field(default_factory=list)

    @field_validator('services')
    @classmethod
    def validate_unique_ids(cls, v):
        """Service ids must be unique across the catalog."""
        seen = set()
        for service in v:
            if service.id in seen:
                raise ValueError(f"duplicate service definition id: {service.id}")
            seen.add(service.id)
        return v

    def get_service_definition(self, service_definition_id: str) -> Optional[ServiceDefinition]:
        """Find a service definition by id."""
        for service in self.services:
            if service.id == service_definition_id:
                return service
        return None
