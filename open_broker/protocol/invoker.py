"""Invocation of broker operations.

Failures raised by an operation never propagate out of ``invoke``; they are
returned inside the ``Outcome`` so status derivation can treat a response and
a failure the same way.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from open_broker.exceptions import ServiceBrokerError
from open_broker.services.events import EventFlowRegistry, FlowStage, OperationKind

logger = logging.getLogger(__name__)


@dataclass
class Outcome:
    """Result of one broker operation: a response or a failure."""
    response: Any = None
    failure: Optional[Exception] = None

    @property
    def failed(self) -> bool:
        return self.failure is not None


def run_sync(value: Any) -> Any:
    """Drive an awaitable to completion on a private event loop."""
    if not inspect.isawaitable(value):
        return value

    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(value)
    finally:
        loop.close()


class OperationInvoker:
    """Runs an operation together with its event flows."""

    def __init__(self, events: Optional[EventFlowRegistry] = None):
        self.events = events or EventFlowRegistry()

    def _run_flows(self, stage: FlowStage, kind: OperationKind, *args) -> None:
        for flow in self.events.get_flows(stage, kind):
            run_sync(flow(*args))

    def invoke(self, kind: OperationKind, operation: Callable[[Any], Any], request: Any) -> Outcome:
        """Invoke an operation and capture its response or failure."""
        logger.debug(f"Invoking {kind.value}: {request!r}")

        try:
            self._run_flows(FlowStage.INITIALIZATION, kind, request)
            response = run_sync(operation(request))
            self._run_flows(FlowStage.COMPLETION, kind, request, response)
        except ServiceBrokerError as e:
            logger.debug(f"{kind.value} failed: {e}")
            self._run_error_flows(kind, request, e)
            return Outcome(failure=e)
        except Exception as e:
            logger.error(f"Unexpected error in {kind.value}: {e}", exc_info=True)
            self._run_error_flows(kind, request, e)
            return Outcome(failure=e)

        logger.debug(f"{kind.value} succeeded: {response!r}")
        return Outcome(response=response)

    def _run_error_flows(self, kind: OperationKind, request: Any, failure: Exception) -> None:
        try:
            self._run_flows(FlowStage.ERROR, kind, request, failure)
        except Exception as e:
            logger.error(f"Error flow for {kind.value} failed: {e}", exc_info=True)
