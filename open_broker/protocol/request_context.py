"""Request-scoped fields shared by every broker operation."""

from dataclasses import dataclass
from typing import Mapping, Optional

from open_broker.models.context import Context
from open_broker.models.service_broker import ServiceBrokerRequest
from open_broker.protocol.identity import decode_originating_identity

API_INFO_LOCATION_HEADER = "X-Api-Info-Location"
ORIGINATING_IDENTITY_HEADER = "X-Broker-API-Originating-Identity"
REQUEST_IDENTITY_HEADER = "X-Broker-API-Request-Identity"


@dataclass
class RequestContext:
    """Path and header derived fields attached to an operation request."""
    platform_instance_id: Optional[str] = None
    api_info_location: Optional[str] = None
    originating_identity: Optional[Context] = None
    request_identity: Optional[str] = None

    def __post_init__(self):
        if not self.platform_instance_id:
            self.platform_instance_id = None

    def apply_to(self, request: ServiceBrokerRequest) -> ServiceBrokerRequest:
        """Copy the fields onto an operation request."""
        request.platform_instance_id = self.platform_instance_id
        request.api_info_location = self.api_info_location
        request.originating_identity = self.originating_identity
        request.request_identity = self.request_identity
        return request


def assemble_request_context(platform_instance_id: Optional[str],
                             headers: Mapping[str, str]) -> RequestContext:
    """Collect the request-scoped fields for one inbound call.

    Raises:
        InvalidOriginatingIdentityError: if the identity header is present but malformed
    """
    return RequestContext(
        platform_instance_id=platform_instance_id,
        api_info_location=headers.get(API_INFO_LOCATION_HEADER),
        originating_identity=decode_originating_identity(headers.get(ORIGINATING_IDENTITY_HEADER)),
        request_identity=headers.get(REQUEST_IDENTITY_HEADER)
    )
