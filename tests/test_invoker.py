"""Tests for operation invocation and event flows."""

import pytest
from unittest.mock import AsyncMock, Mock

from open_broker.exceptions import InstanceNotFoundError
from open_broker.models.instance import CreateServiceInstanceResponse
from open_broker.protocol.invoker import OperationInvoker, Outcome, run_sync
from open_broker.services.events import EventFlowRegistry, FlowStage, OperationKind

KIND = OperationKind.CREATE_INSTANCE


class TestRunSync:

    def test_plain_value(self):
        assert run_sync(42) == 42

    def test_coroutine(self):
        async def answer():
            return 42

        assert run_sync(answer()) == 42


class TestOperationInvoker:
    """Test failure capture."""

    @pytest.fixture
    def request_obj(self):
        return Mock(name='request')

    def test_response(self, request_obj):
        response = CreateServiceInstanceResponse()
        operation = Mock(return_value=response)

        outcome = OperationInvoker().invoke(KIND, operation, request_obj)

        assert outcome == Outcome(response=response)
        assert not outcome.failed
        operation.assert_called_once_with(request_obj)

    def test_async_operation(self, request_obj):
        response = CreateServiceInstanceResponse()
        operation = AsyncMock(return_value=response)

        outcome = OperationInvoker().invoke(KIND, operation, request_obj)

        assert outcome.response is response
        operation.assert_awaited_once_with(request_obj)

    def test_broker_failure_captured(self, request_obj):
        failure = InstanceNotFoundError('i1')

        outcome = OperationInvoker().invoke(KIND, Mock(side_effect=failure), request_obj)

        assert outcome.failed
        assert outcome.failure is failure

    def test_unexpected_failure_captured(self, request_obj):
        outcome = OperationInvoker().invoke(KIND, AsyncMock(side_effect=RuntimeError("boom")), request_obj)

        assert isinstance(outcome.failure, RuntimeError)


class TestEventFlows:
    """Test initialization, completion and error flows."""

    def test_flow_order(self):
        calls = []
        events = (
            EventFlowRegistry()
            .add_initialization_flow(KIND, lambda request: calls.append('init'))
            .add_completion_flow(KIND, lambda request, response: calls.append('complete'))
            .add_error_flow(KIND, lambda request, error: calls.append('error'))
        )

        def operation(request):
            calls.append('operation')
            return None

        OperationInvoker(events).invoke(KIND, operation, Mock())

        assert calls == ['init', 'operation', 'complete']

    def test_flows_are_per_kind(self):
        flow = Mock()
        events = EventFlowRegistry().add_initialization_flow(OperationKind.DELETE_INSTANCE, flow)

        OperationInvoker(events).invoke(KIND, Mock(return_value=None), Mock())

        flow.assert_not_called()
        assert events.has_flows(OperationKind.DELETE_INSTANCE)
        assert not events.has_flows(KIND)

    def test_error_flow_receives_failure(self):
        error_flow = AsyncMock()
        failure = InstanceNotFoundError('i1')
        events = EventFlowRegistry().add_error_flow(KIND, error_flow)
        request = Mock()

        OperationInvoker(events).invoke(KIND, Mock(side_effect=failure), request)

        error_flow.assert_awaited_once_with(request, failure)

    def test_failing_completion_flow_becomes_failure(self):
        events = EventFlowRegistry().add_completion_flow(KIND, Mock(side_effect=InstanceNotFoundError('i1')))

        outcome = OperationInvoker(events).invoke(KIND, Mock(return_value=None), Mock())

        assert isinstance(outcome.failure, InstanceNotFoundError)

    def test_failing_error_flow_keeps_original_failure(self):
        failure = InstanceNotFoundError('i1')
        events = EventFlowRegistry().add_error_flow(KIND, Mock(side_effect=RuntimeError("flow broke")))

        outcome = OperationInvoker(events).invoke(KIND, Mock(side_effect=failure), Mock())

        assert outcome.failure is failure

    def test_get_flows_copy(self):
        flow = Mock()
        events = EventFlowRegistry().add_initialization_flow(KIND, flow)

        flows = events.get_flows(FlowStage.INITIALIZATION, KIND)
        flows.clear()

        assert events.get_flows(FlowStage.INITIALIZATION, KIND) == [flow]
