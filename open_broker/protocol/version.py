"""API version negotiation."""

import logging
from dataclasses import dataclass
from typing import Optional

from open_broker.exceptions import ApiVersionMissingError, ApiVersionMismatchError

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION_HEADER = "X-Broker-API-Version"
API_VERSION_ANY = "*"
API_VERSION_CURRENT = "2.16"


@dataclass(frozen=True)
class BrokerApiVersion:
    """Expected API version and the header that carries it."""
    api_version: str = API_VERSION_ANY
    header: str = DEFAULT_API_VERSION_HEADER

    @property
    def accepts_any(self) -> bool:
        return self.api_version == API_VERSION_ANY


def check_api_version(expected: Optional[BrokerApiVersion], provided: Optional[str]) -> None:
    """Validate the version header of an inbound request.

    Args:
        expected: Configured version, or None when the check is disabled
        provided: Value of the version header, None when absent

    Raises:
        ApiVersionMissingError: if a concrete version is configured and the header is absent
        ApiVersionMismatchError: if the header differs from the configured version
    """
    if expected is None or expected.accepts_any:
        return

    if provided is None:
        logger.debug(f"Rejecting request without {expected.header} header")
        raise ApiVersionMissingError(expected.api_version)

    if provided != expected.api_version:
        logger.debug(f"Rejecting API version {provided!r}, expected {expected.api_version!r}")
        raise ApiVersionMismatchError(expected.api_version, provided)
