"""Factory classes for creating sample catalogs and requests."""

from typing import Dict, Any, Optional
import uuid

from open_broker.models.catalog import (
    Catalog, ServiceDefinition, Plan, MaintenanceInfo, Schemas,
    ServiceInstanceSchema, ServiceBindingSchema, MethodSchema
)
from open_broker.models.context import build_context, CLOUD_FOUNDRY_PLATFORM, KUBERNETES_PLATFORM, Context
from open_broker.models.instance import (
    CreateServiceInstanceRequest, UpdateServiceInstanceRequest, DeleteServiceInstanceRequest
)
from open_broker.models.binding import CreateServiceInstanceBindingRequest

SAMPLE_SERVICE_ID = "sample-service"
SAMPLE_PLAN_IDS = ("basic", "standard", "premium")


class CatalogFactory:
    """Factory for creating catalog documents."""

    @staticmethod
    def create_plan(plan_id: str, name: Optional[str] = None, **overrides) -> Plan:
        """Create a plan with sensible defaults."""
        data = {
            'id': plan_id,
            'name': name or plan_id,
            'description': f"{(name or plan_id).title()} plan",
        }
        data.update(overrides)
        return Plan(**data)

    @staticmethod
    def create_service_definition(
        service_id: str = SAMPLE_SERVICE_ID,
        plan_ids=SAMPLE_PLAN_IDS,
        bindable: bool = True
    ) -> ServiceDefinition:
        """Create a service definition offering the given plans."""
        return ServiceDefinition(
            id=service_id,
            name=service_id,
            description=f"Sample service {service_id}",
            bindable=bindable,
            tags=["sample"],
            plans=[CatalogFactory.create_plan(plan_id) for plan_id in plan_ids]
        )

    @staticmethod
    def create_catalog() -> Catalog:
        """Create the sample catalog."""
        parameters_schema = {
            "$schema": "http://json-schema.org/draft-04/schema#",
            "type": "object",
            "properties": {
                "size": {"type": "integer", "minimum": 1}
            }
        }

        basic = CatalogFactory.create_plan("basic", free=True)
        standard = CatalogFactory.create_plan(
            "standard",
            free=False,
            plan_updateable=True,
            maintenance_info=MaintenanceInfo(version="1.0.0", description="Initial release"),
            schemas=Schemas(
                service_instance=ServiceInstanceSchema(
                    create=MethodSchema(parameters=parameters_schema),
                    update=MethodSchema(parameters=parameters_schema)
                ),
                service_binding=ServiceBindingSchema(
                    create=MethodSchema(parameters={"type": "object"})
                )
            )
        )
        premium = CatalogFactory.create_plan(
            "premium",
            free=False,
            bindable=False,
            maximum_polling_duration=3600,
            metadata={"costs": [{"amount": {"usd": 99.0}, "unit": "MONTHLY"}]}
        )

        return Catalog(services=[
            ServiceDefinition(
                id=SAMPLE_SERVICE_ID,
                name="sample",
                description="Sample managed service",
                bindable=True,
                plan_updateable=True,
                instances_retrievable=True,
                bindings_retrievable=True,
                tags=["sample", "managed"],
                metadata={"displayName": "Sample Service"},
                plans=[basic, standard, premium]
            )
        ])


class ContextFactory:
    """Factory for creating platform contexts."""

    @staticmethod
    def create_cloud_foundry(**properties) -> Context:
        data = {
            'organization_guid': str(uuid.uuid4()),
            'space_guid': str(uuid.uuid4()),
        }
        data.update(properties)
        return build_context(CLOUD_FOUNDRY_PLATFORM, data)

    @staticmethod
    def create_kubernetes(namespace: str = "default", **properties) -> Context:
        data = {'namespace': namespace}
        data.update(properties)
        return build_context(KUBERNETES_PLATFORM, data)


class RequestFactory:
    """Factory for creating operation requests."""

    @staticmethod
    def create_instance_request(
        instance_id: Optional[str] = None,
        plan_id: str = "standard",
        parameters: Optional[Dict[str, Any]] = None,
        **overrides
    ) -> CreateServiceInstanceRequest:
        data = {
            'service_id': SAMPLE_SERVICE_ID,
            'plan_id': plan_id,
            'organization_guid': str(uuid.uuid4()),
            'space_guid': str(uuid.uuid4()),
            'parameters': parameters,
            'service_instance_id': instance_id or str(uuid.uuid4()),
        }
        data.update(overrides)
        return CreateServiceInstanceRequest(**data)

    @staticmethod
    def update_instance_request(instance_id: Optional[str] = None, plan_id: str = "premium",
                                **overrides) -> UpdateServiceInstanceRequest:
        data = {
            'service_id': SAMPLE_SERVICE_ID,
            'plan_id': plan_id,
            'service_instance_id': instance_id or str(uuid.uuid4()),
        }
        data.update(overrides)
        return UpdateServiceInstanceRequest(**data)

    @staticmethod
    def delete_instance_request(instance_id: Optional[str] = None, plan_id: str = "standard",
                                **overrides) -> DeleteServiceInstanceRequest:
        data = {
            'service_instance_id': instance_id or str(uuid.uuid4()),
            'service_definition_id': SAMPLE_SERVICE_ID,
            'plan_id': plan_id,
        }
        data.update(overrides)
        return DeleteServiceInstanceRequest(**data)

    @staticmethod
    def create_binding_request(instance_id: Optional[str] = None, binding_id: Optional[str] = None,
                               plan_id: str = "standard", **overrides) -> CreateServiceInstanceBindingRequest:
        data = {
            'service_id': SAMPLE_SERVICE_ID,
            'plan_id': plan_id,
            'app_guid': str(uuid.uuid4()),
            'service_instance_id': instance_id or str(uuid.uuid4()),
            'binding_id': binding_id or str(uuid.uuid4()),
        }
        data.update(overrides)
        return CreateServiceInstanceBindingRequest(**data)
