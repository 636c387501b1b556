"""Failure taxonomy for the service broker protocol layer."""

from typing import Optional, Dict, Any, List
from enum import Enum

MAX_OPERATION_LENGTH = 10_000


class ErrorCode(str, Enum):
    """Kinds of failure recognized by the protocol layer."""

    # Request gate errors
    API_VERSION_MISSING = "API_VERSION_MISSING"
    API_VERSION_MISMATCH = "API_VERSION_MISMATCH"
    INVALID_ORIGINATING_IDENTITY = "INVALID_ORIGINATING_IDENTITY"
    MALFORMED_REQUEST = "MALFORMED_REQUEST"
    VALIDATION_FAILED = "VALIDATION_FAILED"

    # Catalog errors
    SERVICE_DEFINITION_NOT_FOUND = "SERVICE_DEFINITION_NOT_FOUND"
    PLAN_NOT_FOUND = "PLAN_NOT_FOUND"

    # Resource errors
    INSTANCE_EXISTS = "INSTANCE_EXISTS"
    INSTANCE_NOT_FOUND = "INSTANCE_NOT_FOUND"
    BINDING_EXISTS = "BINDING_EXISTS"
    BINDING_NOT_FOUND = "BINDING_NOT_FOUND"

    # Operation errors
    ASYNC_REQUIRED = "ASYNC_REQUIRED"
    MAINTENANCE_INFO_CONFLICT = "MAINTENANCE_INFO_CONFLICT"
    UPDATE_NOT_SUPPORTED = "UPDATE_NOT_SUPPORTED"
    INVALID_PARAMETERS = "INVALID_PARAMETERS"
    OPERATION_IN_PROGRESS = "OPERATION_IN_PROGRESS"
    CONCURRENCY_ERROR = "CONCURRENCY_ERROR"
    BINDING_REQUIRES_APP = "BINDING_REQUIRES_APP"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    # Anything else raised by a broker
    BROKER_ERROR = "BROKER_ERROR"


class ServiceBrokerError(Exception):
    """Base exception class for the protocol layer."""

    def __init__(
        self,
        description: str,
        error_code: ErrorCode = ErrorCode.BROKER_ERROR,
        error: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """Initialize the exception.

        Args:
            description: Human-readable error description
            error_code: Kind of failure
            error: Stable machine-readable code sent on the wire, if any
            details: Additional context about the error
            cause: The underlying exception that caused this error
        """
        super().__init__(description)
        self.description = description
        self.error_code = error_code
        self.error = error
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a wire error document."""
        result = {'description': self.description}
        if self.error:
            result['error'] = self.error
        return result

    def __str__(self) -> str:
        """String representation of the exception."""
        base_str = f"{self.error_code.value}: {self.description}"

        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            base_str += f" ({details_str})"

        if self.cause:
            base_str += f" [caused by: {self.cause}]"

        return base_str


class ApiVersionMissingError(ServiceBrokerError):
    """Raised when the API version header is required but absent."""

    def __init__(self, expected_version: str):
        super().__init__(
            description=(
                "The service broker API version header is missing: "
                f"expected version={expected_version}"
            ),
            error_code=ErrorCode.API_VERSION_MISSING,
            details={'expected_version': expected_version}
        )


class ApiVersionMismatchError(ServiceBrokerError):
    """Raised when the API version header differs from the configured version."""

    def __init__(self, expected_version: str, provided_version: str):
        super().__init__(
            description=(
                "The provided service broker API version is not supported: "
                f"expected version={expected_version}, provided version={provided_version}"
            ),
            error_code=ErrorCode.API_VERSION_MISMATCH,
            details={
                'expected_version': expected_version,
                'provided_version': provided_version
            }
        )


class InvalidOriginatingIdentityError(ServiceBrokerError):
    """Raised when the originating identity header cannot be decoded."""

    def __init__(self, reason: str, cause: Optional[Exception] = None):
        super().__init__(
            description=f"Service broker originating identity parameters are invalid: {reason}",
            error_code=ErrorCode.INVALID_ORIGINATING_IDENTITY,
            cause=cause
        )


class MalformedRequestError(ServiceBrokerError):
    """Raised when a request body is not a JSON object."""

    def __init__(self, description: str = "Request body must be a JSON object"):
        super().__init__(
            description=description,
            error_code=ErrorCode.MALFORMED_REQUEST
        )


class RequestValidationError(ServiceBrokerError):
    """Raised when required request fields are missing or invalid."""

    def __init__(self, fields: List[str]):
        self.fields = list(fields)
        super().__init__(
            description=f"Missing or invalid required fields: {', '.join(self.fields)}",
            error_code=ErrorCode.VALIDATION_FAILED,
            details={'fields': self.fields}
        )


class ServiceDefinitionNotFoundError(ServiceBrokerError):
    """Raised when a service definition id is not in the catalog."""

    def __init__(self, service_definition_id: str):
        super().__init__(
            description=f"Service definition does not exist: id={service_definition_id}",
            error_code=ErrorCode.SERVICE_DEFINITION_NOT_FOUND,
            details={'service_definition_id': service_definition_id}
        )


class PlanNotFoundError(ServiceBrokerError):
    """Raised when a plan id is not part of the resolved service definition."""

    def __init__(self, plan_id: str):
        super().__init__(
            description=f"Service definition plan does not exist: id={plan_id}",
            error_code=ErrorCode.PLAN_NOT_FOUND,
            details={'plan_id': plan_id}
        )


class InstanceExistsError(ServiceBrokerError):
    """Exception for when a service instance already exists with other attributes."""

    def __init__(self, instance_id: str, service_definition_id: Optional[str] = None):
        description = f"Service instance with the given ID already exists: serviceInstanceId={instance_id}"
        if service_definition_id:
            description += f", serviceDefinitionId={service_definition_id}"
        super().__init__(
            description=description,
            error_code=ErrorCode.INSTANCE_EXISTS,
            details={'instance_id': instance_id}
        )


class InstanceNotFoundError(ServiceBrokerError):
    """Exception for when a service instance is not found."""

    def __init__(self, instance_id: str):
        super().__init__(
            description=f"Service instance does not exist: id={instance_id}",
            error_code=ErrorCode.INSTANCE_NOT_FOUND,
            details={'instance_id': instance_id}
        )


class BindingExistsError(ServiceBrokerError):
    """Exception for when a service binding already exists with other attributes."""

    def __init__(self, instance_id: str, binding_id: str):
        super().__init__(
            description=(
                "Service instance binding already exists: "
                f"serviceInstanceId={instance_id}, bindingId={binding_id}"
            ),
            error_code=ErrorCode.BINDING_EXISTS,
            details={'instance_id': instance_id, 'binding_id': binding_id}
        )


class BindingNotFoundError(ServiceBrokerError):
    """Exception for when a service binding is not found."""

    def __init__(self, binding_id: str):
        super().__init__(
            description=f"Service binding does not exist: id={binding_id}",
            error_code=ErrorCode.BINDING_NOT_FOUND,
            details={'binding_id': binding_id}
        )


class AsyncRequiredError(ServiceBrokerError):
    """Raised when a plan can only be served asynchronously."""

    ERROR = "AsyncRequired"
    DEFAULT_MESSAGE = "This service plan requires client support for asynchronous service operations."

    def __init__(self, description: Optional[str] = None):
        super().__init__(
            description=description or self.DEFAULT_MESSAGE,
            error_code=ErrorCode.ASYNC_REQUIRED,
            error=self.ERROR
        )


class MaintenanceInfoConflictError(ServiceBrokerError):
    """Raised when the requested maintenance info does not match the plan's."""

    ERROR = "MaintenanceInfoConflict"
    DEFAULT_MESSAGE = "The maintenance information for the requested Service Plan has changed."

    def __init__(self, description: Optional[str] = None):
        super().__init__(
            description=(
                f"Service broker maintenance info conflict: {description}"
                if description else self.DEFAULT_MESSAGE
            ),
            error_code=ErrorCode.MAINTENANCE_INFO_CONFLICT,
            error=self.ERROR
        )


class UpdateNotSupportedError(ServiceBrokerError):
    """Raised when the requested instance update cannot be performed."""

    def __init__(self, description: str):
        super().__init__(
            description=f"Service instance update not supported: {description}",
            error_code=ErrorCode.UPDATE_NOT_SUPPORTED
        )


class InvalidParametersError(ServiceBrokerError):
    """Raised when the opaque parameters of a request are rejected."""

    def __init__(self, description: str, cause: Optional[Exception] = None):
        super().__init__(
            description=f"Service broker parameters are invalid: {description}",
            error_code=ErrorCode.INVALID_PARAMETERS,
            cause=cause
        )


class OperationInProgressError(ServiceBrokerError):
    """Raised while an operation on the requested instance or binding is still running.

    The operation token, when supplied, is reported back to the platform so it
    can poll the last-operation endpoint.
    """

    MESSAGE_PREFIX = "Service broker operation is in progress for the requested service instance or binding"

    def __init__(self, operation: Optional[str] = None):
        if operation and len(operation) > MAX_OPERATION_LENGTH:
            raise ValueError(f"operation strings are restricted to {MAX_OPERATION_LENGTH:,} characters")

        description = self.MESSAGE_PREFIX
        if operation:
            description += f": operation={operation}"

        super().__init__(
            description=description,
            error_code=ErrorCode.OPERATION_IN_PROGRESS
        )
        self.operation = operation


class CreateOperationInProgressError(OperationInProgressError):
    """A create operation is still running."""

    MESSAGE_PREFIX = "Service broker create operation is in progress for the requested service instance or binding"


class UpdateOperationInProgressError(OperationInProgressError):
    """An update operation is still running."""

    MESSAGE_PREFIX = "Service broker update operation is in progress for the requested service instance"


class DeleteOperationInProgressError(OperationInProgressError):
    """A delete operation is still running."""

    MESSAGE_PREFIX = "Service broker delete operation is in progress for the requested service instance or binding"


class ConcurrencyError(ServiceBrokerError):
    """Raised when a broker rejects concurrent operations on one resource."""

    ERROR = "ConcurrencyError"

    def __init__(self, description: str = "Another operation for this Service Instance is in progress."):
        super().__init__(
            description=description,
            error_code=ErrorCode.CONCURRENCY_ERROR,
            error=self.ERROR
        )


class BindingRequiresAppError(ServiceBrokerError):
    """Raised when a binding can only be created for an application."""

    ERROR = "RequiresApp"

    def __init__(self, description: str = "This Service supports generation of credentials through binding an application only."):
        super().__init__(
            description=description,
            error_code=ErrorCode.BINDING_REQUIRES_APP,
            error=self.ERROR
        )


class ServiceUnavailableError(ServiceBrokerError):
    """Raised when the broker cannot currently serve the request."""

    def __init__(self, description: str = "Service broker is temporarily unavailable"):
        super().__init__(
            description=description,
            error_code=ErrorCode.SERVICE_UNAVAILABLE
        )
