"""Workflow — the engine instance a caller builds and starts."""

import logging
from collections.abc import Iterable
from typing import Any, TypeVar

from flowrun.core.driver import Driver, RunReport
from flowrun.core.errors import InvalidWorkflowState, WorkflowCanceled, WorkflowFailed
from flowrun.core.node import Group, Logic, Node, Subflow, check_unique_names
from flowrun.core.state import FailureDetails, WorkflowState
from flowrun.core.store import OutputStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Workflow:
    """A named tree of nodes plus the state of its single run.

    ``start()`` runs the root sequence to a terminal state and never raises
    for node failures: inspect ``state`` and ``failure`` afterwards, or call
    ``raise_for_state()``. Outputs are read from ``outputs`` / ``output()``
    under ``"{node}.{key}"`` names.
    """

    def __init__(self, name: str, nodes: Iterable[Node] = (), *, description: str = "") -> None:
        self.name = name
        self.description = description
        self.nodes: list[Node] = list(nodes)
        check_unique_names(self.nodes, scope=f"workflow {name!r}")
        self.state = WorkflowState.NOT_STARTED
        self.store = OutputStore()
        self.failure: FailureDetails | None = None
        self.report = RunReport()
        self.cancel_requested = False

    async def start(self) -> None:
        if self.state != WorkflowState.NOT_STARTED:
            logger.warning(
                "%s: start() ignored, %s",
                self.name,
                InvalidWorkflowState(self.state.value, WorkflowState.NOT_STARTED.value),
            )
            return

        self.state = WorkflowState.RUNNING
        logger.info("Workflow %s started (%d nodes)", self.name, len(self.nodes))
        driver = Driver(self)
        try:
            failure = await driver.run()
        except Exception as e:
            logger.exception("Workflow %s: driver error", self.name)
            failure = FailureDetails(node_name=self.name, error=WorkflowFailed(self.name, str(e)))
        self.report = driver.report

        if failure is None:
            self.state = WorkflowState.COMPLETED
        elif isinstance(failure.error, WorkflowCanceled):
            self.state = WorkflowState.CANCELED
            self.failure = failure
        else:
            self.state = WorkflowState.FAILED
            self.failure = failure

        self.store.freeze()
        if self.failure is not None:
            logger.warning("Workflow %s %s at %s", self.name, self.state.value, self.failure)
        else:
            logger.info("Workflow %s completed in %.0fms", self.name, self.report.duration_ms)

    async def run(self) -> dict[str, Any]:
        """Start the workflow and return all outputs."""
        await self.start()
        return self.outputs

    async def run_output(self, key: str, type_: type[T] | None = None) -> Any:
        """Start the workflow and return one output, or ``None`` if absent."""
        await self.start()
        return self.output(key, type_)

    @property
    def outputs(self) -> dict[str, Any]:
        return self.store.snapshot()

    def output(self, key: str, type_: type[T] | None = None, default: Any = None) -> Any:
        """Look up ``"{node}.{key}"``; wrong type or missing key gives *default*."""
        if type_ is None:
            return self.store.get(key, default)
        return self.store.get_as(key, type_, default)

    def cancel(self) -> None:
        """Stop launching new nodes; nodes already running finish."""
        self.cancel_requested = True
        for sub in _subflows(self.nodes):
            sub.workflow.cancel()

    def reset(self) -> None:
        """Forget the previous run so the workflow can be started again."""
        if self.state == WorkflowState.RUNNING:
            raise InvalidWorkflowState(self.state.value, "terminal")
        self.state = WorkflowState.NOT_STARTED
        self.store = OutputStore()
        self.failure = None
        self.report = RunReport()
        self.cancel_requested = False
        for sub in _subflows(self.nodes):
            sub.workflow.reset()

    def raise_for_state(self) -> None:
        """Raise the captured error unless the run completed."""
        if self.state == WorkflowState.COMPLETED:
            return
        if self.failure is not None:
            raise self.failure.error
        raise InvalidWorkflowState(self.state.value, WorkflowState.COMPLETED.value)

    def __repr__(self) -> str:
        return f"Workflow({self.name!r}, nodes={len(self.nodes)}, state={self.state.value})"


def _subflows(nodes: Iterable[Node]) -> Iterable[Subflow]:
    for node in nodes:
        if isinstance(node, Subflow):
            yield node
        elif isinstance(node, Group):
            yield from _subflows(node.nodes)
        elif isinstance(node, Logic):
            yield from _subflows(node.branches)
