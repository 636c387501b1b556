"""Service definition and plan resolution against the catalog."""

import logging
from typing import Optional, Tuple

from open_broker.exceptions import ServiceDefinitionNotFoundError, PlanNotFoundError
from open_broker.models.catalog import Catalog, ServiceDefinition, Plan
from open_broker.models.service_broker import ServiceBrokerRequest

logger = logging.getLogger(__name__)


def resolve(catalog: Catalog, service_definition_id: str,
            plan_id: Optional[str] = None) -> Tuple[ServiceDefinition, Optional[Plan]]:
    """Resolve a service/plan pair.

    The returned definition is a copy whose ``plans`` only contain the
    requested plan; without a plan id the definition is returned unfiltered.
    The catalog itself is never modified.

    Raises:
        ServiceDefinitionNotFoundError: if the service id is unknown
        PlanNotFoundError: if a plan id is given and not offered by the service
    """
    definition = catalog.get_service_definition(service_definition_id)
    if definition is None:
        raise ServiceDefinitionNotFoundError(service_definition_id)

    if plan_id is None:
        return definition, None

    plan = definition.get_plan(plan_id)
    if plan is None:
        raise PlanNotFoundError(plan_id)

    return definition.model_copy(update={'plans': [plan]}), plan


class CatalogResolver:
    """Attaches resolved catalog entries to operation requests."""

    def __init__(self, catalog_service):
        """Initialize the resolver.

        Args:
            catalog_service: Provider whose ``get_catalog()`` is consulted on every call
        """
        self.catalog_service = catalog_service

    def resolve(self, request: ServiceBrokerRequest, service_definition_id: str,
                plan_id: Optional[str] = None) -> ServiceBrokerRequest:
        """Resolve ids for a request that must name a known service."""
        definition, plan = resolve(self.catalog_service.get_catalog(), service_definition_id, plan_id)
        request.service_definition = definition
        request.plan = plan
        return request

    def resolve_optional(self, request: ServiceBrokerRequest, service_definition_id: Optional[str],
                         plan_id: Optional[str] = None) -> ServiceBrokerRequest:
        """Resolve ids that the platform may omit, such as on polls and fetches."""
        if not service_definition_id:
            return request
        return self.resolve(request, service_definition_id, plan_id or None)
