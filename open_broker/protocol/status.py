"""HTTP status derivation for broker operations.

``decide_status`` is a pure function of the operation kind, the outcome of
the broker call and the platform's ``accepts_incomplete`` flag. A failure
first gets its default status from the error code and is then adjusted for
the operation it interrupted, e.g. a missing instance is ``410 Gone`` for a
delete but ``404`` for a fetch.
"""

import logging
from typing import Any, Dict, Tuple

from open_broker.exceptions import ErrorCode, OperationInProgressError
from open_broker.models.binding import BindingStatus
from open_broker.models.error import ErrorMessage, OperationInProgressMessage
from open_broker.models.service_broker import OperationState
from open_broker.protocol.invoker import Outcome
from open_broker.services.events import OperationKind
from open_broker.utils.error_handlers import ErrorResponseFormatter

logger = logging.getLogger(__name__)

BINDING_CONFLICT_DESCRIPTION = "Service instance binding already exists with different parameters"

CREATE_KINDS = frozenset({OperationKind.CREATE_INSTANCE, OperationKind.CREATE_BINDING})
ASYNC_KINDS = frozenset({
    OperationKind.CREATE_INSTANCE, OperationKind.UPDATE_INSTANCE, OperationKind.DELETE_INSTANCE,
    OperationKind.CREATE_BINDING, OperationKind.DELETE_BINDING,
})
LAST_OPERATION_KINDS = frozenset({
    OperationKind.GET_INSTANCE_LAST_OPERATION, OperationKind.GET_BINDING_LAST_OPERATION,
})

FAILURE_OVERRIDES: Dict[OperationKind, Dict[ErrorCode, int]] = {
    OperationKind.CREATE_INSTANCE: {
        ErrorCode.OPERATION_IN_PROGRESS: 202,
    },
    OperationKind.UPDATE_INSTANCE: {
        ErrorCode.OPERATION_IN_PROGRESS: 202,
    },
    OperationKind.DELETE_INSTANCE: {
        ErrorCode.INSTANCE_NOT_FOUND: 410,
        ErrorCode.OPERATION_IN_PROGRESS: 202,
    },
    OperationKind.GET_INSTANCE: {
        ErrorCode.INSTANCE_NOT_FOUND: 404,
        ErrorCode.OPERATION_IN_PROGRESS: 404,
    },
    OperationKind.GET_INSTANCE_LAST_OPERATION: {
        ErrorCode.INSTANCE_NOT_FOUND: 400,
    },
    OperationKind.CREATE_BINDING: {
        ErrorCode.INSTANCE_NOT_FOUND: 422,
        ErrorCode.OPERATION_IN_PROGRESS: 202,
    },
    OperationKind.GET_BINDING: {
        ErrorCode.BINDING_NOT_FOUND: 404,
        ErrorCode.OPERATION_IN_PROGRESS: 404,
    },
    OperationKind.DELETE_BINDING: {
        ErrorCode.BINDING_NOT_FOUND: 410,
        ErrorCode.INSTANCE_NOT_FOUND: 422,
        ErrorCode.OPERATION_IN_PROGRESS: 202,
    },
    OperationKind.GET_BINDING_LAST_OPERATION: {
        ErrorCode.INSTANCE_NOT_FOUND: 400,
        ErrorCode.BINDING_NOT_FOUND: 410,
    },
}


def failure_status(kind: OperationKind, failure: Exception) -> int:
    """Status for a failed operation."""
    status = ErrorResponseFormatter.get_http_status(failure)
    error_code = getattr(failure, 'error_code', None)
    return FAILURE_OVERRIDES.get(kind, {}).get(error_code, status)


def response_status(kind: OperationKind, response: Any) -> int:
    """Status for an operation that returned normally."""
    if response is None:
        return 201 if kind in CREATE_KINDS else 200

    if kind in ASYNC_KINDS and getattr(response, 'async_', False):
        return 202

    if kind == OperationKind.CREATE_INSTANCE:
        return 200 if getattr(response, 'instance_existed', False) else 201

    if kind == OperationKind.CREATE_BINDING:
        binding_status = getattr(response, 'binding_status', None)
        if binding_status == BindingStatus.EXISTS_WITH_DIFFERENT_PARAMETERS:
            return 409
        if binding_status == BindingStatus.EXISTS_WITH_IDENTICAL_PARAMETERS:
            return 200
        if binding_status == BindingStatus.NEW:
            return 201
        return 200 if getattr(response, 'binding_existed', False) else 201

    if kind in LAST_OPERATION_KINDS:
        succeeded = getattr(response, 'state', None) == OperationState.SUCCEEDED
        return 410 if succeeded and getattr(response, 'delete_operation', False) else 200

    return 200


def decide_status(kind: OperationKind, outcome: Outcome, async_accepted: bool = False) -> int:
    """Derive the HTTP status of an operation from its outcome.

    ``async_accepted`` never changes the status; an asynchronous answer to a
    platform that did not accept one is only logged.
    """
    if outcome.failed:
        return failure_status(kind, outcome.failure)

    if not async_accepted and kind in ASYNC_KINDS and getattr(outcome.response, 'async_', False):
        logger.warning(f"{kind.value} answered asynchronously although accepts_incomplete was not set")

    return response_status(kind, outcome.response)


def _response_body(response: Any) -> Dict[str, Any]:
    if response is None:
        return {}
    if hasattr(response, 'to_wire'):
        return response.to_wire()
    return dict(response)


def render(kind: OperationKind, outcome: Outcome, async_accepted: bool = False) -> Tuple[Dict[str, Any], int]:
    """Build the response body and status for an operation outcome.

    Returns:
        Tuple of (response_dict, http_status_code)
    """
    status = decide_status(kind, outcome, async_accepted)

    if outcome.failed:
        failure = outcome.failure
        if status == 202 and isinstance(failure, OperationInProgressError):
            return OperationInProgressMessage(operation=failure.operation).to_wire(), status
        return ErrorResponseFormatter.to_error_message(failure).to_wire(), status

    if status == 409:
        return ErrorMessage(description=BINDING_CONFLICT_DESCRIPTION).to_wire(), status

    return _response_body(outcome.response), status
