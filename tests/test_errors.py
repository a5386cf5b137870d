"""Tests for the error taxonomy and helpers."""

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
    format_error,
    is_recoverable,
    recovery_suggestions,
    wrap_error,
)


class TestMessages:
    def test_task_failed(self):
        err = TaskExecutionFailed("Task2", "boom")
        assert str(err) == "Task 'Task2' execution failed: boom"
        assert err.reason == "boom"
        assert err.kind is ErrorKind.TASK_FAILED
        assert err.code == 1004

    def test_input_resolution(self):
        err = InputResolutionFailed("U", "text", "Required input not found")
        assert str(err) == "Failed to resolve input 'text' for task 'U': Required input not found"
        assert err.code == 1005

    def test_component_failed(self):
        err = ComponentExecutionFailed("Branch", "Logic", "bad predicate")
        assert str(err) == "Logic component 'Branch' execution failed: bad predicate"
        assert err.component_type == "Logic"

    def test_invalid_state(self):
        err = InvalidWorkflowState("completed", "not_started")
        assert "current 'completed'" in str(err)
        assert err.reason == "Expected state 'not_started' but found 'completed'"

    def test_workflow_failed_keeps_cause(self):
        err = WorkflowFailed("Sub", "inner failure", cause="details")
        assert err.cause == "details"
        assert err.code == 1000

    def test_custom_with_context(self):
        err = CustomError("Test error", context={"task": "T", "count": 3})
        assert err.context == {"task": "T", "count": "3"}
        assert str(err) == "Test error (Context: task: T, count: 3)"

    def test_custom_without_context(self):
        assert str(CustomError("plain")) == "plain"
        assert CustomError("plain").code == 1099

    def test_all_are_flow_errors(self):
        for err in (WorkflowPaused("w"), WorkflowCanceled("w"), CustomError("m")):
            assert isinstance(err, FlowError)


class TestRecoverable:
    def test_paused_is_recoverable(self):
        assert is_recoverable(WorkflowPaused("w"))

    def test_canceled_is_not(self):
        assert not is_recoverable(WorkflowCanceled("w"))

    def test_task_failure_is_not(self):
        assert not is_recoverable(TaskExecutionFailed("t", "r"))

    def test_foreign_exception_is_not(self):
        assert not is_recoverable(RuntimeError("x"))


class TestHelpers:
    def test_wrap_error(self):
        cause = RuntimeError("disk full")
        wrapped = wrap_error(cause, "save", {"path": "/tmp/x"})
        assert wrapped.message == "save failed: disk full"
        assert wrapped.context["operation"] == "save"
        assert wrapped.context["underlying_error"] == "disk full"
        assert wrapped.context["path"] == "/tmp/x"
        assert wrapped.__cause__ is cause

    def test_format_flow_error(self):
        text = format_error(TaskExecutionFailed("T", "boom"))
        assert "Reason: boom" in text
        assert "Suggestion:" in text

    def test_format_foreign_error(self):
        assert format_error(ValueError("bad")) == "Error: bad"

    def test_recovery_suggestions(self):
        assert recovery_suggestions(WorkflowPaused("w")) == [WorkflowPaused.recovery_suggestion]
        assert len(recovery_suggestions(KeyError("k"))) == 1
