"""Workflow lifecycle states and captured failure details."""

from dataclasses import dataclass
from enum import Enum

from flowrun.core.errors import ErrorKind, FlowError, WorkflowFailed, is_recoverable


class WorkflowState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in (WorkflowState.COMPLETED, WorkflowState.FAILED, WorkflowState.CANCELED)


@dataclass(frozen=True)
class FailureDetails:
    """The error that ended a run and the node that raised it.

    ``node_name`` is a node of the failing workflow's own tree. A failing
    subflow is reported under the subflow's name; its inner failure is the
    ``cause`` of the :class:`WorkflowFailed` error, and ``origin`` follows
    that chain down to the innermost node.
    """

    node_name: str
    error: BaseException
    path: str | None = None

    @property
    def kind(self) -> ErrorKind:
        if isinstance(self.error, FlowError):
            return self.error.kind
        return ErrorKind.TASK_FAILED

    @property
    def reason(self) -> str:
        if isinstance(self.error, FlowError):
            return self.error.reason
        return str(self.error)

    @property
    def recoverable(self) -> bool:
        return is_recoverable(self.error)

    @property
    def origin(self) -> "FailureDetails":
        details = self
        while isinstance(details.error, WorkflowFailed) and details.error.cause is not None:
            details = details.error.cause
        return details

    def __str__(self) -> str:
        return f"{self.path or self.node_name}: {self.error}"
