"""Composable async workflow engine: units, groups, subflows and logic nodes."""

from flowrun.core.driver import RunReport
from flowrun.core.errors import (
    ComponentExecutionFailed,
    CustomError,
    ErrorKind,
    FlowError,
    InputResolutionFailed,
    InvalidWorkflowState,
    TaskExecutionFailed,
    WorkflowCanceled,
    WorkflowFailed,
    WorkflowPaused,
    is_recoverable,
)
from flowrun.core.node import Group, Logic, Mode, NodeResult, NodeStatus, Subflow, Unit
from flowrun.core.resolver import Inputs, Ref, ref
from flowrun.core.retry import RetryPolicy, execute_with_retry, with_retry
from flowrun.core.state import FailureDetails, WorkflowState
from flowrun.core.store import OutputStore
from flowrun.core.workflow import Workflow

__all__ = [
    "ComponentExecutionFailed",
    "CustomError",
    "ErrorKind",
    "FailureDetails",
    "FlowError",
    "Group",
    "InputResolutionFailed",
    "Inputs",
    "InvalidWorkflowState",
    "Logic",
    "Mode",
    "NodeResult",
    "NodeStatus",
    "OutputStore",
    "Ref",
    "RetryPolicy",
    "RunReport",
    "Subflow",
    "TaskExecutionFailed",
    "Unit",
    "Workflow",
    "WorkflowCanceled",
    "WorkflowFailed",
    "WorkflowPaused",
    "WorkflowState",
    "execute_with_retry",
    "is_recoverable",
    "ref",
    "with_retry",
]
