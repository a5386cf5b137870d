"""Shorthand builders for workflows, tasks and common utility units."""

import asyncio
import logging
import uuid
from collections.abc import Callable
from typing import Any

from flowrun.core.node import Computation, Logic, Node, Unit
from flowrun.core.resolver import Inputs
from flowrun.core.retry import RetryPolicy
from flowrun.core.workflow import Workflow

logger = logging.getLogger(__name__)


def _auto_name(prefix: str, length: int = 8) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:length].upper()}"


def workflow(name: str | None, *nodes: Node, description: str = "") -> Workflow:
    """Build a workflow; ``name=None`` picks ``Workflow_<id>``."""
    return Workflow(name or _auto_name("Workflow"), nodes, description=description)


def task(
    name: str | None,
    execute: Computation,
    *,
    description: str = "",
    inputs: dict[str, Any] | None = None,
    retry: RetryPolicy | None = None,
) -> Unit:
    """Build a unit; ``name=None`` picks ``Task_<id>``."""
    return Unit(
        name=name or _auto_name("Task"),
        run=execute,
        description=description,
        inputs=inputs or {},
        retry=retry,
    )


def delay(seconds: float, name: str | None = None) -> Unit:
    """A unit that just sleeps."""

    async def _sleep(inputs: Inputs) -> dict[str, Any]:
        await asyncio.sleep(seconds)
        return {"delay_completed": True, "duration": seconds}

    return Unit(
        name=name or f"Delay_{int(seconds)}s",
        run=_sleep,
        description=f"Delay execution for {seconds} seconds",
    )


def emit(message: str, name: str | None = None, inputs: dict[str, Any] | None = None) -> Unit:
    """A unit that logs *message*, filling ``{name}`` placeholders from its inputs."""

    async def _emit(inputs: Inputs) -> dict[str, Any]:
        text = inputs.render(message)
        logger.info("%s", text)
        return {"message_printed": text}

    return Unit(
        name=name or _auto_name("Print", 4),
        run=_emit,
        description=f"Print message: {message}",
        inputs=inputs or {},
    )


def conditional(
    name: str,
    condition: Callable[[dict[str, Any]], bool],
    if_true: Node,
    if_false: Node | None = None,
) -> Logic:
    """Run *if_true* when *condition* holds for the outputs so far, else *if_false*."""
    return Logic.conditional(name, condition, if_true, if_false)
