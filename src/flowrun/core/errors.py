"""Error taxonomy surfaced by the engine, plus helpers for inspecting errors."""

from enum import Enum


class ErrorKind(Enum):
    WORKFLOW_FAILED = "workflow_failed"
    INVALID_STATE = "invalid_state"
    CANCELED = "canceled"
    PAUSED = "paused"
    TASK_FAILED = "task_failed"
    INPUT_RESOLUTION = "input_resolution"
    COMPONENT_FAILED = "component_failed"
    CUSTOM = "custom"


ERROR_CODES: dict[ErrorKind, int] = {
    ErrorKind.WORKFLOW_FAILED: 1000,
    ErrorKind.INVALID_STATE: 1001,
    ErrorKind.CANCELED: 1002,
    ErrorKind.PAUSED: 1003,
    ErrorKind.TASK_FAILED: 1004,
    ErrorKind.INPUT_RESOLUTION: 1005,
    ErrorKind.COMPONENT_FAILED: 1006,
    ErrorKind.CUSTOM: 1099,
}


class FlowError(Exception):
    """Base class for every error the engine attributes to a node or workflow.

    ``reason`` is the short cause, ``context`` a string-keyed diagnostic bag.
    """

    kind: ErrorKind = ErrorKind.CUSTOM
    recovery_suggestion: str = "Review the error context and check system configuration"

    def __init__(self, message: str, *, reason: str | None = None, context: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason if reason is not None else message
        self.context: dict[str, str] = {k: str(v) for k, v in (context or {}).items()}

    @property
    def code(self) -> int:
        return ERROR_CODES[self.kind]

    def __str__(self) -> str:
        return self.message


class WorkflowFailed(FlowError):
    """A workflow (usually a subflow) did not complete.

    ``cause`` holds the nested workflow's :class:`~flowrun.core.workflow.FailureDetails`.
    """

    kind = ErrorKind.WORKFLOW_FAILED
    recovery_suggestion = "Check workflow configuration and ensure all required inputs are provided"

    def __init__(self, operation: str, reason: str, cause=None) -> None:
        super().__init__(f"Workflow operation '{operation}' failed: {reason}", reason=reason)
        self.operation = operation
        self.cause = cause


class InvalidWorkflowState(FlowError):
    kind = ErrorKind.INVALID_STATE
    recovery_suggestion = "Ensure workflow is in the correct state before performing the operation"

    def __init__(self, current_state: str, expected_state: str) -> None:
        super().__init__(
            f"Invalid workflow state: current '{current_state}', expected '{expected_state}'",
            reason=f"Expected state '{expected_state}' but found '{current_state}'",
        )
        self.current_state = current_state
        self.expected_state = expected_state


class WorkflowCanceled(FlowError):
    kind = ErrorKind.CANCELED
    recovery_suggestion = "Restart the workflow if cancellation was unintentional"

    def __init__(self, workflow_name: str) -> None:
        super().__init__(
            f"Workflow '{workflow_name}' was canceled",
            reason=f"Workflow '{workflow_name}' was canceled by user or system",
        )
        self.workflow_name = workflow_name


class WorkflowPaused(FlowError):
    kind = ErrorKind.PAUSED
    recovery_suggestion = "Re-run the remaining nodes once the pause condition clears"

    def __init__(self, workflow_name: str) -> None:
        super().__init__(
            f"Workflow '{workflow_name}' is paused and cannot proceed",
            reason=f"Workflow '{workflow_name}' is paused and waiting for resume",
        )
        self.workflow_name = workflow_name


class TaskExecutionFailed(FlowError):
    kind = ErrorKind.TASK_FAILED
    recovery_suggestion = "Check task implementation and ensure all dependencies are met"

    def __init__(self, task_name: str, reason: str) -> None:
        super().__init__(f"Task '{task_name}' execution failed: {reason}", reason=reason)
        self.task_name = task_name


class InputResolutionFailed(FlowError):
    kind = ErrorKind.INPUT_RESOLUTION
    recovery_suggestion = "Verify input keys exist in workflow outputs and check reference syntax"

    def __init__(self, task_name: str, input_key: str, reason: str) -> None:
        super().__init__(
            f"Failed to resolve input '{input_key}' for task '{task_name}': {reason}",
            reason=reason,
        )
        self.task_name = task_name
        self.input_key = input_key


class ComponentExecutionFailed(FlowError):
    kind = ErrorKind.COMPONENT_FAILED
    recovery_suggestion = "Check component configuration and ensure all required parameters are provided"

    def __init__(self, component_name: str, component_type: str, reason: str) -> None:
        super().__init__(
            f"{component_type} component '{component_name}' execution failed: {reason}",
            reason=reason,
        )
        self.component_name = component_name
        self.component_type = component_type


class CustomError(FlowError):
    kind = ErrorKind.CUSTOM

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message, context=context)

    def __str__(self) -> str:
        if self.context:
            pairs = ", ".join(f"{k}: {v}" for k, v in self.context.items())
            return f"{self.message} (Context: {pairs})"
        return self.message


def is_recoverable(exc: BaseException) -> bool:
    """Only a paused workflow is worth retrying; everything else is final."""
    return isinstance(exc, FlowError) and exc.kind is ErrorKind.PAUSED


def wrap_error(exc: BaseException, operation: str, context: dict | None = None) -> CustomError:
    """Wrap *exc* in a :class:`CustomError` that records the failing operation."""
    bag = dict(context or {})
    bag["underlying_error"] = str(exc)
    bag["operation"] = operation
    wrapped = CustomError(f"{operation} failed: {exc}", context=bag)
    wrapped.__cause__ = exc
    return wrapped


def format_error(exc: BaseException) -> str:
    if isinstance(exc, FlowError):
        return f"{exc} (Reason: {exc.reason}) (Suggestion: {exc.recovery_suggestion})"
    return f"Error: {exc}"


def recovery_suggestions(exc: BaseException) -> list[str]:
    if isinstance(exc, FlowError):
        return [exc.recovery_suggestion]
    return ["Review the error message and check system configuration"]
