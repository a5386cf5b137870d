"""Node variants (Unit, Group, Subflow, Logic), NodeResult and NodeStatus."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

from flowrun.core.errors import ComponentExecutionFailed, FlowError, TaskExecutionFailed
from flowrun.core.errors import is_recoverable as default_is_recoverable
from flowrun.core.resolver import Inputs, Ref, parse_bindings
from flowrun.core.retry import RetryPolicy, execute_with_retry

if TYPE_CHECKING:
    from flowrun.core.workflow import Workflow

Computation = Callable[[Inputs], Awaitable[dict[str, Any]]]
Evaluator = Callable[[dict[str, Any]], Any]


class Mode(Enum):
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class NodeStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


@dataclass
class NodeResult:
    status: NodeStatus
    outputs: dict[str, Any] = field(default_factory=dict)
    error: BaseException | None = None
    duration_ms: float = 0.0


@dataclass(eq=False)
class Unit:
    """Leaf work item: resolved inputs in, output dict out.

    ``inputs`` values are literals or ``"{node.key}"`` references; references
    are parsed here, at construction, and looked up when the unit starts.
    """

    name: str
    run: Computation
    description: str = ""
    inputs: dict[str, Any] = field(default_factory=dict)
    retry: RetryPolicy | None = None
    retry_if: Callable[[BaseException], bool] = default_is_recoverable

    def __post_init__(self) -> None:
        _check_name(self.name)
        self.bindings = parse_bindings(self.inputs)

    async def execute(self, inputs: Inputs | None = None) -> dict[str, Any]:
        """Run the computation once (or under its retry policy).

        Errors that are not already a :class:`FlowError` come back as
        :class:`TaskExecutionFailed` naming this unit.
        """
        if inputs is None:
            inputs = Inputs(
                {k: v for k, v in self.bindings.items() if not isinstance(v, Ref)},
                unit=self.name,
            )

        async def attempt() -> dict[str, Any]:
            return await self.run(inputs)

        try:
            if self.retry is not None:
                outputs = await execute_with_retry(attempt, self.retry, self.retry_if)
            else:
                outputs = await attempt()
        except FlowError:
            raise
        except Exception as e:
            raise TaskExecutionFailed(self.name, str(e) or type(e).__name__) from e

        if not isinstance(outputs, dict):
            raise TaskExecutionFailed(self.name, f"expected a dict of outputs, got {type(outputs).__name__}")
        return outputs


@dataclass(eq=False)
class Group:
    name: str
    nodes: list[Node]
    mode: Mode = Mode.SEQUENTIAL
    description: str = ""

    def __post_init__(self) -> None:
        _check_name(self.name)
        if isinstance(self.mode, str):
            self.mode = Mode(self.mode)
        self.nodes = list(self.nodes)
        check_unique_names(self.nodes, scope=f"group {self.name!r}")


@dataclass(eq=False)
class Subflow:
    """A whole nested workflow, run as one node of its parent."""

    name: str
    workflow: Workflow
    description: str = ""

    def __post_init__(self) -> None:
        _check_name(self.name)

    @classmethod
    def of(cls, name: str, nodes: Iterable[Node], description: str = "") -> Subflow:
        from flowrun.core.workflow import Workflow

        return cls(name=name, workflow=Workflow(name, list(nodes), description=description), description=description)


@dataclass(eq=False)
class Logic:
    """Branching or side-effecting node.

    ``evaluate`` gets a read-only snapshot of the outputs so far and returns
    the nodes to run next (in this node's scope, sequentially), or ``None``
    when it only performs an effect. It may be sync or async.

    ``branches`` lists the nodes the evaluator can return, so that
    ``Workflow.reset()`` and ``Workflow.cancel()`` reach subflows inside them.
    """

    name: str
    evaluate: Evaluator
    description: str = ""
    branches: list[Node] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_name(self.name)
        self.branches = list(self.branches)

    async def select(self, outputs: dict[str, Any]) -> list[Node]:
        try:
            chosen = self.evaluate(outputs)
            if inspect.isawaitable(chosen):
                chosen = await chosen
        except FlowError:
            raise
        except Exception as e:
            raise ComponentExecutionFailed(self.name, "Logic", str(e) or type(e).__name__) from e

        if chosen is None:
            return []
        if isinstance(chosen, (Unit, Group, Subflow, Logic)):
            return [chosen]
        try:
            nodes = list(chosen)
            check_unique_names(nodes, scope=f"logic {self.name!r}")
        except (TypeError, ValueError) as e:
            raise ComponentExecutionFailed(self.name, "Logic", f"evaluator returned {chosen!r}: {e}") from e
        return nodes

    @classmethod
    def conditional(
        cls,
        name: str,
        predicate: Callable[[dict[str, Any]], bool],
        if_true: Node,
        if_false: Node | None = None,
        description: str = "Conditional execution",
    ) -> Logic:
        def choose(outputs: dict[str, Any]) -> Node | None:
            return if_true if predicate(outputs) else if_false

        branches = [n for n in (if_true, if_false) if n is not None]
        return cls(name=name, evaluate=choose, description=description, branches=branches)


Node = Union[Unit, Group, Subflow, Logic]


def _check_name(name: str) -> None:
    if not name or "." in name:
        raise ValueError(f"Invalid node name {name!r}: must be non-empty and contain no '.'")


def check_unique_names(nodes: Sequence[Node], scope: str = "workflow") -> None:
    seen: set[str] = set()
    for node in nodes:
        if not isinstance(node, (Unit, Group, Subflow, Logic)):
            raise TypeError(f"Not a node in {scope}: {node!r}")
        if node.name in seen:
            raise ValueError(f"Duplicate node name {node.name!r} in {scope}")
        seen.add(node.name)
