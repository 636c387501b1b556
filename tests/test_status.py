"""Tests for HTTP status derivation."""

import pytest
from unittest.mock import patch

from open_broker.exceptions import (
    AsyncRequiredError, BindingNotFoundError, ConcurrencyError, InstanceNotFoundError,
    InvalidParametersError, MaintenanceInfoConflictError, OperationInProgressError,
    ServiceUnavailableError, UpdateOperationInProgressError
)
from open_broker.models.binding import CreateServiceInstanceBindingResponse, BindingStatus
from open_broker.models.instance import (
    CreateServiceInstanceResponse, GetLastServiceOperationResponse, UpdateServiceInstanceResponse
)
from open_broker.models.service_broker import OperationState
from open_broker.protocol.invoker import Outcome
from open_broker.protocol.status import decide_status, render
from open_broker.services.events import OperationKind


class TestCreateInstanceStatus:
    """Create instance: existed x async."""

    @pytest.mark.parametrize("existed,is_async,expected", [
        (False, False, 201),
        (True, False, 200),
        (False, True, 202),
        (True, True, 202),
    ])
    def test_existed_and_async(self, existed, is_async, expected):
        response = CreateServiceInstanceResponse(instance_existed=existed, async_=is_async)

        assert decide_status(OperationKind.CREATE_INSTANCE, Outcome(response=response)) == expected

    def test_no_response(self):
        assert decide_status(OperationKind.CREATE_INSTANCE, Outcome()) == 201

    def test_async_accepted_does_not_change_status(self):
        response = CreateServiceInstanceResponse(async_=True)

        assert decide_status(OperationKind.CREATE_INSTANCE, Outcome(response=response), True) == 202
        assert decide_status(OperationKind.CREATE_INSTANCE, Outcome(response=response), False) == 202

    def test_unaccepted_async_is_logged(self):
        response = CreateServiceInstanceResponse(async_=True)

        with patch('open_broker.protocol.status.logger') as logger:
            decide_status(OperationKind.CREATE_INSTANCE, Outcome(response=response), False)

        logger.warning.assert_called_once()

    def test_pure(self):
        outcome = Outcome(response=CreateServiceInstanceResponse(instance_existed=True))

        first = decide_status(OperationKind.CREATE_INSTANCE, outcome)
        second = decide_status(OperationKind.CREATE_INSTANCE, outcome)

        assert first == second == 200


class TestCreateBindingStatus:
    """Create binding: status precedence."""

    def test_binding_status_takes_precedence(self):
        response = CreateServiceInstanceBindingResponse(
            binding_existed=True, binding_status=BindingStatus.NEW
        )

        assert decide_status(OperationKind.CREATE_BINDING, Outcome(response=response)) == 201

    def test_binding_existed(self):
        response = CreateServiceInstanceBindingResponse(binding_existed=True)

        assert decide_status(OperationKind.CREATE_BINDING, Outcome(response=response)) == 200

    def test_async_overrides_existence(self):
        response = CreateServiceInstanceBindingResponse(
            async_=True, binding_status=BindingStatus.EXISTS_WITH_IDENTICAL_PARAMETERS
        )

        assert decide_status(OperationKind.CREATE_BINDING, Outcome(response=response)) == 202

    def test_no_response(self):
        assert decide_status(OperationKind.CREATE_BINDING, Outcome()) == 201


class TestLastOperationStatus:

    @pytest.mark.parametrize("kind", [
        OperationKind.GET_INSTANCE_LAST_OPERATION, OperationKind.GET_BINDING_LAST_OPERATION
    ])
    @pytest.mark.parametrize("state,delete_operation,expected", [
        (OperationState.IN_PROGRESS, False, 200),
        (OperationState.IN_PROGRESS, True, 200),
        (OperationState.FAILED, True, 200),
        (OperationState.SUCCEEDED, False, 200),
        (OperationState.SUCCEEDED, True, 410),
    ])
    def test_states(self, kind, state, delete_operation, expected):
        response = GetLastServiceOperationResponse(state=state, delete_operation=delete_operation)

        assert decide_status(kind, Outcome(response=response)) == expected


class TestFailureStatus:
    """Failure to status mapping, including per-operation overrides."""

    @pytest.mark.parametrize("kind,failure,expected", [
        (OperationKind.DELETE_INSTANCE, InstanceNotFoundError('i'), 410),
        (OperationKind.GET_INSTANCE, InstanceNotFoundError('i'), 404),
        (OperationKind.GET_INSTANCE_LAST_OPERATION, InstanceNotFoundError('i'), 400),
        (OperationKind.CREATE_BINDING, InstanceNotFoundError('i'), 422),
        (OperationKind.DELETE_BINDING, InstanceNotFoundError('i'), 422),
        (OperationKind.GET_BINDING, BindingNotFoundError('b'), 404),
        (OperationKind.DELETE_BINDING, BindingNotFoundError('b'), 410),
        (OperationKind.GET_BINDING_LAST_OPERATION, BindingNotFoundError('b'), 410),
        (OperationKind.GET_BINDING_LAST_OPERATION, InstanceNotFoundError('i'), 400),
        (OperationKind.UPDATE_INSTANCE, UpdateOperationInProgressError('t'), 202),
        (OperationKind.GET_INSTANCE, OperationInProgressError('t'), 404),
        (OperationKind.GET_INSTANCE_LAST_OPERATION, OperationInProgressError('t'), 404),
        (OperationKind.CREATE_INSTANCE, AsyncRequiredError(), 422),
        (OperationKind.UPDATE_INSTANCE, MaintenanceInfoConflictError(), 422),
        (OperationKind.UPDATE_INSTANCE, ConcurrencyError(), 422),
        (OperationKind.CREATE_BINDING, InvalidParametersError("size"), 400),
        (OperationKind.CREATE_INSTANCE, ServiceUnavailableError(), 503),
        (OperationKind.CREATE_INSTANCE, KeyError("boom"), 500),
    ])
    def test_failure(self, kind, failure, expected):
        assert decide_status(kind, Outcome(failure=failure)) == expected


class TestRender:
    """Response bodies."""

    def test_operation_in_progress_body(self):
        body, status = render(OperationKind.UPDATE_INSTANCE,
                              Outcome(failure=UpdateOperationInProgressError('task-3')))

        assert status == 202
        assert body == {'operation': 'task-3'}

    def test_operation_in_progress_hidden_on_get(self):
        body, status = render(OperationKind.GET_INSTANCE, Outcome(failure=OperationInProgressError('task-3')))

        assert status == 404
        assert 'task-3' in body['description']

    def test_error_code_included(self):
        body, status = render(OperationKind.UPDATE_INSTANCE, Outcome(failure=MaintenanceInfoConflictError()))

        assert body == {
            'error': 'MaintenanceInfoConflict',
            'description': 'The maintenance information for the requested Service Plan has changed.'
        }

    def test_unknown_failure_without_message(self):
        body, status = render(OperationKind.CREATE_INSTANCE, Outcome(failure=RuntimeError()))

        assert status == 500
        assert body == {'description': 'RuntimeError'}

    def test_response_body(self):
        body, status = render(OperationKind.UPDATE_INSTANCE,
                              Outcome(response=UpdateServiceInstanceResponse(dashboard_url="https://d")))

        assert status == 200
        assert body == {'dashboard_url': 'https://d'}

    def test_last_operation_gone_keeps_body(self):
        response = GetLastServiceOperationResponse(state=OperationState.SUCCEEDED, delete_operation=True)

        body, status = render(OperationKind.GET_INSTANCE_LAST_OPERATION, Outcome(response=response))

        assert status == 410
        assert body == {'state': 'succeeded'}
