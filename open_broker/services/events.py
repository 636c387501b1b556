"""Callbacks run around broker operations."""

import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class OperationKind(str, Enum):
    """Broker operations exposed over the wire."""
    CREATE_INSTANCE = "create_instance"
    UPDATE_INSTANCE = "update_instance"
    DELETE_INSTANCE = "delete_instance"
    GET_INSTANCE = "get_instance"
    GET_INSTANCE_LAST_OPERATION = "get_instance_last_operation"
    CREATE_BINDING = "create_binding"
    GET_BINDING = "get_binding"
    DELETE_BINDING = "delete_binding"
    GET_BINDING_LAST_OPERATION = "get_binding_last_operation"


class FlowStage(str, Enum):
    INITIALIZATION = "initialization"
    COMPLETION = "completion"
    ERROR = "error"


class EventFlowRegistry:
    """Registry of initialization, completion and error flows per operation.

    Initialization flows receive the request, completion flows the request and
    the response, error flows the request and the failure. Flows may be plain
    callables or coroutine functions.
    """

    def __init__(self):
        self._flows: Dict[FlowStage, Dict[OperationKind, List[Callable]]] = {
            stage: defaultdict(list) for stage in FlowStage
        }

    def add_initialization_flow(self, kind: OperationKind, flow: Callable[[Any], Any]) -> 'EventFlowRegistry':
        self._flows[FlowStage.INITIALIZATION][kind].append(flow)
        return self

    def add_completion_flow(self, kind: OperationKind, flow: Callable[[Any, Any], Any]) -> 'EventFlowRegistry':
        self._flows[FlowStage.COMPLETION][kind].append(flow)
        return self

    def add_error_flow(self, kind: OperationKind, flow: Callable[[Any, Exception], Any]) -> 'EventFlowRegistry':
        self._flows[FlowStage.ERROR][kind].append(flow)
        return self

    def get_flows(self, stage: FlowStage, kind: OperationKind) -> List[Callable]:
        """Flows registered for a stage, in registration order."""
        return list(self._flows[stage].get(kind, []))

    def has_flows(self, kind: OperationKind) -> bool:
        return any(self._flows[stage].get(kind) for stage in FlowStage)
