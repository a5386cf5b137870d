"""Tests for the convenience builders."""

import logging

import pytest

from flowrun.convenience import conditional, delay, emit, task, workflow
from flowrun.core.state import WorkflowState


async def executed(inputs):
    return {"executed": True}


class TestWorkflowBuilder:
    def test_named(self):
        wf = workflow("Test Workflow", task("Test Task", executed), description="A test workflow")
        assert wf.name == "Test Workflow"
        assert wf.description == "A test workflow"
        assert [n.name for n in wf.nodes] == ["Test Task"]

    def test_auto_named(self):
        assert workflow(None).name.startswith("Workflow_")

    @pytest.mark.asyncio
    async def test_names_with_spaces_work_as_namespaces(self):
        wf = workflow("Execution Test", task("Execution Task", executed))
        await wf.start()
        assert wf.output("Execution Task.executed") is True


class TestTaskBuilder:
    def test_fields(self):
        unit = task("Test Task", executed, description="A test task", inputs={"input": "test"})
        assert unit.name == "Test Task"
        assert unit.description == "A test task"
        assert unit.inputs["input"] == "test"

    def test_auto_named(self):
        assert task(None, executed).name.startswith("Task_")


class TestUtilityUnits:
    @pytest.mark.asyncio
    async def test_delay(self):
        unit = delay(0.01, name="TestDelay")
        assert unit.name == "TestDelay"
        outputs = await unit.execute()
        assert outputs == {"delay_completed": True, "duration": 0.01}

    def test_delay_default_name(self):
        assert delay(2).name == "Delay_2s"

    @pytest.mark.asyncio
    async def test_emit_logs_message(self, caplog):
        unit = emit("Test Message", name="TestPrint")
        with caplog.at_level(logging.INFO, logger="flowrun.convenience"):
            outputs = await unit.execute()
        assert outputs == {"message_printed": "Test Message"}
        assert "Test Message" in caplog.text

    @pytest.mark.asyncio
    async def test_emit_renders_references(self):
        wf = workflow(
            "W",
            task("Count", lambda inputs: _value({"n": 3})),
            emit("count is {n}", name="Say", inputs={"n": "{Count.n}"}),
        )
        await wf.start()
        assert wf.output("Say.message_printed") == "count is 3"


class TestConditional:
    @pytest.mark.asyncio
    async def test_false_branch(self):
        wf = workflow(
            "W",
            conditional(
                "TestConditional",
                lambda outputs: False,
                task("TrueTask", lambda inputs: _value({"condition": "true"})),
                task("FalseTask", lambda inputs: _value({"condition": "false"})),
            ),
        )
        await wf.start()
        assert wf.state == WorkflowState.COMPLETED
        assert wf.output("FalseTask.condition") == "false"
        assert wf.output("TrueTask.condition") is None


async def _value(outputs):
    return outputs
