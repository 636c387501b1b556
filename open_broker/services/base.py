"""Abstract base classes for the broker's operation implementations.

Methods may be plain functions or coroutines; the protocol layer awaits
whatever they return.
"""

from abc import ABC, abstractmethod
from typing import Optional

from open_broker.models.catalog import Catalog, ServiceDefinition
from open_broker.models.instance import (
    CreateServiceInstanceRequest, CreateServiceInstanceResponse,
    UpdateServiceInstanceRequest, UpdateServiceInstanceResponse,
    DeleteServiceInstanceRequest, DeleteServiceInstanceResponse,
    GetServiceInstanceRequest, GetServiceInstanceResponse,
    GetLastServiceOperationRequest, GetLastServiceOperationResponse
)
from open_broker.models.binding import (
    CreateServiceInstanceBindingRequest, CreateServiceInstanceBindingResponse,
    GetServiceInstanceBindingRequest, GetServiceInstanceBindingResponse,
    DeleteServiceInstanceBindingRequest, DeleteServiceInstanceBindingResponse,
    GetLastServiceBindingOperationRequest, GetLastServiceBindingOperationResponse
)


class CatalogService(ABC):
    """Source of the catalog advertised to platforms."""

    @abstractmethod
    def get_catalog(self) -> Catalog:
        """Return the current catalog. Called on every request."""
        pass

    def get_service_definition(self, service_definition_id: str) -> Optional[ServiceDefinition]:
        """Find a service definition by id."""
        return self.get_catalog().get_service_definition(service_definition_id)


class ServiceInstanceService(ABC):
    """Business logic for service instances."""

    @abstractmethod
    def create_service_instance(self, request: CreateServiceInstanceRequest) -> Optional[CreateServiceInstanceResponse]:
        """Provision a service instance."""
        pass

    @abstractmethod
    def delete_service_instance(self, request: DeleteServiceInstanceRequest) -> Optional[DeleteServiceInstanceResponse]:
        """Deprovision a service instance."""
        pass

    def get_service_instance(self, request: GetServiceInstanceRequest) -> GetServiceInstanceResponse:
        raise NotImplementedError("This service broker does not support retrieving service instances")

    def get_last_operation(self, request: GetLastServiceOperationRequest) -> GetLastServiceOperationResponse:
        raise NotImplementedError("This service broker does not support asynchronous service instance operations")

    def update_service_instance(self, request: UpdateServiceInstanceRequest) -> Optional[UpdateServiceInstanceResponse]:
        raise NotImplementedError("This service broker does not support updating service instances")


class ServiceInstanceBindingService(ABC):
    """Business logic for service bindings.

    Every operation is optional; brokers override the ones they support.
    """

    def create_service_instance_binding(
        self, request: CreateServiceInstanceBindingRequest
    ) -> Optional[CreateServiceInstanceBindingResponse]:
        raise NotImplementedError("This service broker does not support creating service bindings")

    def get_service_instance_binding(
        self, request: GetServiceInstanceBindingRequest
    ) -> GetServiceInstanceBindingResponse:
        raise NotImplementedError("This service broker does not support retrieving service bindings")

    def delete_service_instance_binding(
        self, request: DeleteServiceInstanceBindingRequest
    ) -> Optional[DeleteServiceInstanceBindingResponse]:
        raise NotImplementedError("This service broker does not support deleting service bindings")

    def get_last_operation(
        self, request: GetLastServiceBindingOperationRequest
    ) -> GetLastServiceBindingOperationResponse:
        raise NotImplementedError("This service broker does not support asynchronous service binding operations")


NON_BINDABLE_MESSAGE = (
    "This service broker does not support bindable services. "
    "The service broker should set 'bindable: false' in the service catalog for all service offerings, "
    "or provide an implementation of the binding API."
)


class NonBindableServiceInstanceBindingService(ServiceInstanceBindingService):
    """Binding service used when a broker offers no bindable services."""

    def create_service_instance_binding(self, request):
        raise NotImplementedError(NON_BINDABLE_MESSAGE)

    def get_service_instance_binding(self, request):
        raise NotImplementedError(NON_BINDABLE_MESSAGE)

    def delete_service_instance_binding(self, request):
        raise NotImplementedError(NON_BINDABLE_MESSAGE)

    def get_last_operation(self, request):
        raise NotImplementedError(NON_BINDABLE_MESSAGE)
