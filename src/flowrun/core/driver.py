"""Driver — walks a workflow's node tree and applies the failure policy.

Sequential scopes stop at the first failure and hand it upward. Parallel
groups run every child to completion, keep the outputs of the ones that
succeeded, and absorb the failures; a cancellation still ends the run. Only the driver writes to the store.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from flowrun.core.errors import InvalidWorkflowState, WorkflowCanceled, WorkflowFailed
from flowrun.core.node import Group, Logic, Mode, Node, NodeResult, NodeStatus, Subflow, Unit
from flowrun.core.resolver import resolve_inputs
from flowrun.core.state import FailureDetails, WorkflowState
from flowrun.core.store import OutputStore

if TYPE_CHECKING:
    from flowrun.core.workflow import Workflow

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """Per-node results of one run, keyed by dotted node path."""

    results: dict[str, NodeResult] = field(default_factory=dict)
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return all(r.status == NodeStatus.SUCCESS for r in self.results.values())

    @property
    def failed_nodes(self) -> list[str]:
        return [path for path, r in self.results.items() if r.status == NodeStatus.FAILURE]

    def summary(self) -> dict[str, Any]:
        by_status: dict[str, int] = {}
        for r in self.results.values():
            by_status[r.status.value] = by_status.get(r.status.value, 0) + 1
        return {
            "total": len(self.results),
            "by_status": by_status,
            "duration_ms": self.duration_ms,
            "success": self.success,
        }


class Driver:
    """Execute one workflow's root sequence against its output store."""

    def __init__(self, workflow: Workflow) -> None:
        self.workflow = workflow
        self.report = RunReport()

    async def run(self) -> FailureDetails | None:
        """Run the root sequence; return the failure that aborted it, if any."""
        start = time.monotonic()
        try:
            return await self._run_sequence(self.workflow.nodes, self.workflow.store, prefix="")
        finally:
            self.report.duration_ms = round((time.monotonic() - start) * 1000, 1)

    async def _run_sequence(self, nodes: Sequence[Node], store: OutputStore, prefix: str) -> FailureDetails | None:
        for idx, node in enumerate(nodes):
            if self.workflow.cancel_requested:
                logger.warning("%s: canceled before %s", self.workflow.name, prefix + node.name)
                self._skip(nodes[idx:], prefix)
                return self._failure(node.name, WorkflowCanceled(self.workflow.name), prefix)

            failure = await self._run_node(node, store, prefix)
            if failure is not None:
                self._skip(nodes[idx + 1 :], prefix)
                return failure
        return None

    async def _run_node(self, node: Node, store: OutputStore, prefix: str) -> FailureDetails | None:
        path = prefix + node.name
        logger.info("Running %s", path)
        start = time.monotonic()
        outputs: dict[str, Any] = {}
        failure: FailureDetails | None = None

        match node:
            case Unit():
                inputs = resolve_inputs(node.name, node.bindings, store)
                try:
                    outputs = await node.execute(inputs)
                except Exception as e:
                    failure = self._failure(node.name, e, prefix)
                else:
                    store.merge(node.name, outputs)

            case Group(mode=Mode.SEQUENTIAL):
                failure = await self._run_sequence(node.nodes, store, path + ".")

            case Group(mode=Mode.PARALLEL):
                failure = await self._run_parallel(node, store, path + ".")

            case Subflow():
                try:
                    outputs = await self._run_subflow(node)
                except Exception as e:
                    failure = self._failure(node.name, e, prefix)
                else:
                    store.merge(node.name, outputs)

            case Logic():
                try:
                    chosen = await node.select(store.snapshot())
                except Exception as e:
                    failure = self._failure(node.name, e, prefix)
                else:
                    failure = await self._run_sequence(chosen, store, path + ".")

            case _:
                raise TypeError(f"Unknown node type: {node!r}")

        elapsed_ms = round((time.monotonic() - start) * 1000, 1)
        if failure is None:
            self.report.results[path] = NodeResult(NodeStatus.SUCCESS, outputs=outputs, duration_ms=elapsed_ms)
            logger.info("Finished %s: success", path)
        else:
            self.report.results[path] = NodeResult(NodeStatus.FAILURE, error=failure.error, duration_ms=elapsed_ms)
            logger.warning("Finished %s: failure (%s)", path, failure.error)
        return failure

    async def _run_parallel(self, group: Group, store: OutputStore, prefix: str) -> FailureDetails | None:
        """Run children concurrently; only a cancellation escapes the group."""
        branches = [store.branch() for _ in group.nodes]
        failures = await asyncio.gather(
            *(self._run_node(child, branch, prefix) for child, branch in zip(group.nodes, branches))
        )
        for branch in branches:
            store.commit(branch)
        canceled: FailureDetails | None = None
        for failure in failures:
            if failure is None:
                continue
            if isinstance(failure.error, WorkflowCanceled):
                canceled = canceled or failure
                continue
            logger.warning(
                "%s: %s failed inside parallel group, continuing: %s",
                self.workflow.name,
                failure.path,
                failure.error,
            )
        return canceled

    async def _run_subflow(self, node: Subflow) -> dict[str, Any]:
        sub = node.workflow
        if sub.state != WorkflowState.NOT_STARTED:
            raise InvalidWorkflowState(sub.state.value, WorkflowState.NOT_STARTED.value)

        await sub.start()

        if sub.state == WorkflowState.COMPLETED:
            return sub.outputs
        if sub.state == WorkflowState.CANCELED:
            raise WorkflowCanceled(sub.name)
        reason = str(sub.failure.error) if sub.failure else "subflow did not complete"
        raise WorkflowFailed(node.name, reason, cause=sub.failure)

    def _skip(self, nodes: Sequence[Node], prefix: str) -> None:
        for node in nodes:
            self.report.results[prefix + node.name] = NodeResult(NodeStatus.SKIPPED)

    @staticmethod
    def _failure(node_name: str, error: BaseException, prefix: str) -> FailureDetails:
        return FailureDetails(node_name=node_name, error=error, path=prefix + node_name)
