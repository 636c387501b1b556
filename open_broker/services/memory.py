"""In-memory broker services.

Keeps instances and bindings in dictionaries. Useful for local runs, smoke
tests and as a reference for writing a real broker.
"""

import logging
import threading
import uuid
from typing import Callable, Dict, Any, List, Optional

from open_broker.exceptions import (
    InstanceExistsError, InstanceNotFoundError, BindingExistsError, BindingNotFoundError
)
from open_broker.models.instance import (
    CreateServiceInstanceRequest, CreateServiceInstanceResponse,
    UpdateServiceInstanceRequest, UpdateServiceInstanceResponse,
    DeleteServiceInstanceRequest, DeleteServiceInstanceResponse,
    GetServiceInstanceRequest, GetServiceInstanceResponse,
    GetLastServiceOperationRequest, GetLastServiceOperationResponse
)
from open_broker.models.binding import (
    BindingStatus,
    CreateServiceInstanceBindingRequest, CreateServiceInstanceAppBindingResponse,
    GetServiceInstanceBindingRequest, GetServiceInstanceAppBindingResponse,
    DeleteServiceInstanceBindingRequest, DeleteServiceInstanceBindingResponse,
    GetLastServiceBindingOperationRequest, GetLastServiceBindingOperationResponse
)
from open_broker.models.service_broker import OperationState
from open_broker.services.base import ServiceInstanceService, ServiceInstanceBindingService

logger = logging.getLogger(__name__)


class InMemoryServiceInstanceService(ServiceInstanceService):
    """Synchronous service instance store.

    Callables in ``deletion_listeners`` are called with the instance id after
    an instance is removed.
    """

    def __init__(self, dashboard_url_template: Optional[str] = None):
        self.instances: Dict[str, Dict[str, Any]] = {}
        self.dashboard_url_template = dashboard_url_template
        self.deletion_listeners: List[Callable[[str], None]] = []
        self._lock = threading.Lock()

    def _dashboard_url(self, instance_id: str) -> Optional[str]:
        if self.dashboard_url_template:
            return self.dashboard_url_template.format(instance_id=instance_id)
        return None

    def has_instance(self, instance_id: str) -> bool:
        with self._lock:
            return instance_id in self.instances

    def create_service_instance(self, request: CreateServiceInstanceRequest) -> CreateServiceInstanceResponse:
        """Provision a service instance, idempotent for identical requests."""
        instance_id = request.service_instance_id
        record = {
            'service_id': request.service_definition_id,
            'plan_id': request.plan_id,
            'parameters': dict(request.parameters or {}),
        }

        with self._lock:
            existing = self.instances.get(instance_id)
            if existing is not None:
                if existing != record:
                    raise InstanceExistsError(instance_id, request.service_definition_id)
                logger.info(f"Instance {instance_id} already exists with identical attributes")
                return CreateServiceInstanceResponse(
                    dashboard_url=self._dashboard_url(instance_id),
                    instance_existed=True
                )

            self.instances[instance_id] = record

        logger.info(f"Created instance {instance_id} on plan {request.plan_id}")
        return CreateServiceInstanceResponse(dashboard_url=self._dashboard_url(instance_id))

    def update_service_instance(self, request: UpdateServiceInstanceRequest) -> UpdateServiceInstanceResponse:
        instance_id = request.service_instance_id
        with self._lock:
            record = self.instances.get(instance_id)
            if record is None:
                raise InstanceNotFoundError(instance_id)
            if request.plan_id:
                record['plan_id'] = request.plan_id
            if request.parameters:
                record['parameters'] = {**record['parameters'], **request.parameters}

        logger.info(f"Updated instance {instance_id}")
        return UpdateServiceInstanceResponse(dashboard_url=self._dashboard_url(instance_id))

    def delete_service_instance(self, request: DeleteServiceInstanceRequest) -> DeleteServiceInstanceResponse:
        instance_id = request.service_instance_id
        with self._lock:
            if self.instances.pop(instance_id, None) is None:
                raise InstanceNotFoundError(instance_id)

        for listener in self.deletion_listeners:
            listener(instance_id)

        logger.info(f"Deleted instance {instance_id}")
        return DeleteServiceInstanceResponse()

    def get_service_instance(self, request: GetServiceInstanceRequest) -> GetServiceInstanceResponse:
        with self._lock:
            record = self.instances.get(request.service_instance_id)
            if record is None:
                raise InstanceNotFoundError(request.service_instance_id)
            service_id, plan_id = record['service_id'], record['plan_id']
            parameters = dict(record['parameters'])

        return GetServiceInstanceResponse(
            service_definition_id=service_id,
            plan_id=plan_id,
            parameters=parameters or None,
            dashboard_url=self._dashboard_url(request.service_instance_id)
        )

    def get_last_operation(self, request: GetLastServiceOperationRequest) -> GetLastServiceOperationResponse:
        """Every operation completes synchronously, so the last one has succeeded."""
        if not self.has_instance(request.service_instance_id):
            raise InstanceNotFoundError(request.service_instance_id)
        return GetLastServiceOperationResponse(state=OperationState.SUCCEEDED)


class InMemoryServiceInstanceBindingService(ServiceInstanceBindingService):
    """Synchronous binding store issuing random credentials.

    Bindings are dropped together with their instance.
    """

    def __init__(self, instance_service: InMemoryServiceInstanceService):
        self.instance_service = instance_service
        self.bindings: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()
        instance_service.deletion_listeners.append(self.remove_instance_bindings)

    def _get_binding(self, instance_id: str, binding_id: str) -> Dict[str, Any]:
        """Binding of an instance; the caller holds the lock."""
        binding = self.bindings.get(binding_id)
        if binding is None or binding['instance_id'] != instance_id:
            raise BindingNotFoundError(binding_id)
        return binding

    def remove_instance_bindings(self, instance_id: str) -> None:
        with self._lock:
            stale = [binding_id for binding_id, binding in self.bindings.items()
                     if binding['instance_id'] == instance_id]
            for binding_id in stale:
                del self.bindings[binding_id]

        if stale:
            logger.info(f"Removed {len(stale)} bindings of deleted instance {instance_id}")

    def create_service_instance_binding(
        self, request: CreateServiceInstanceBindingRequest
    ) -> CreateServiceInstanceAppBindingResponse:
        instance_id = request.service_instance_id
        if not self.instance_service.has_instance(instance_id):
            raise InstanceNotFoundError(instance_id)

        parameters = dict(request.parameters or {})

        with self._lock:
            existing = self.bindings.get(request.binding_id)
            if existing is not None:
                if existing['instance_id'] != instance_id:
                    raise BindingExistsError(instance_id, request.binding_id)
                status = (
                    BindingStatus.EXISTS_WITH_IDENTICAL_PARAMETERS
                    if existing['parameters'] == parameters
                    else BindingStatus.EXISTS_WITH_DIFFERENT_PARAMETERS
                )
                return CreateServiceInstanceAppBindingResponse(
                    credentials=dict(existing['credentials']),
                    binding_existed=True,
                    binding_status=status
                )

            credentials = {
                'username': f"user-{uuid.uuid4().hex[:8]}",
                'password': uuid.uuid4().hex,
            }
            self.bindings[request.binding_id] = {
                'instance_id': instance_id,
                'parameters': parameters,
                'credentials': credentials,
            }

        logger.info(f"Created binding {request.binding_id} for instance {instance_id}")
        return CreateServiceInstanceAppBindingResponse(credentials=dict(credentials), binding_status=BindingStatus.NEW)

    def get_service_instance_binding(
        self, request: GetServiceInstanceBindingRequest
    ) -> GetServiceInstanceAppBindingResponse:
        with self._lock:
            binding = self._get_binding(request.service_instance_id, request.binding_id)
            credentials = dict(binding['credentials'])
            parameters = dict(binding['parameters'])

        return GetServiceInstanceAppBindingResponse(credentials=credentials, parameters=parameters or None)

    def delete_service_instance_binding(
        self, request: DeleteServiceInstanceBindingRequest
    ) -> DeleteServiceInstanceBindingResponse:
        if not self.instance_service.has_instance(request.service_instance_id):
            raise InstanceNotFoundError(request.service_instance_id)

        with self._lock:
            self._get_binding(request.service_instance_id, request.binding_id)
            del self.bindings[request.binding_id]

        logger.info(f"Deleted binding {request.binding_id}")
        return DeleteServiceInstanceBindingResponse()

    def get_last_operation(
        self, request: GetLastServiceBindingOperationRequest
    ) -> GetLastServiceBindingOperationResponse:
        with self._lock:
            self._get_binding(request.service_instance_id, request.binding_id)
        return GetLastServiceBindingOperationResponse(state=OperationState.SUCCEEDED)


def create_memory_broker() -> Dict[str, Any]:
    """Broker factory wiring the in-memory services together."""
    instance_service = InMemoryServiceInstanceService()
    return {
        'instance_service': instance_service,
        'binding_service': InMemoryServiceInstanceBindingService(instance_service),
    }
