"""Workflow loader — build a Workflow from a YAML definition.

Example::

    name: release-notes
    nodes:
      - shell: Log
        command: git log --oneline -20
      - group: Drafts
        mode: parallel
        nodes:
          - claude: Short
            prompt: "Summarize in one line:\\n{log}"
            inputs: {log: "{Log.stdout}"}
          - claude: Long
            prompt: "Write release notes for:\\n{log}"
            inputs: {log: "{Log.stdout}"}
"""

from pathlib import Path
from typing import Any

import yaml

from flowrun.convenience import delay, emit
from flowrun.core.node import Group, Mode, Node, Subflow
from flowrun.core.workflow import Workflow
from flowrun.units.claude import DEFAULT_MAX_TOKENS, DEFAULT_MODEL, claude_unit
from flowrun.units.file_ops import file_reader_unit
from flowrun.units.shell import DEFAULT_TIMEOUT, shell_unit

NODE_TYPES = ("shell", "read", "claude", "delay", "emit", "group", "subflow")


def _require(entry: dict[str, Any], field: str, where: str) -> Any:
    if field not in entry or entry[field] is None:
        raise ValueError(f"{where}: missing required field {field!r}")
    return entry[field]


def build_node(entry: dict[str, Any], where: str = "node") -> Node:
    """Build one node from its mapping; the type is whichever ``NODE_TYPES`` key is present."""
    if not isinstance(entry, dict):
        raise ValueError(f"{where}: expected a mapping, got {type(entry).__name__}")

    kinds = [k for k in NODE_TYPES if k in entry]
    if len(kinds) != 1:
        raise ValueError(f"{where}: expected exactly one of {', '.join(NODE_TYPES)}")
    kind = kinds[0]
    name = str(entry[kind])
    where = f"{where} ({kind} {name!r})"
    inputs = entry.get("inputs") or {}

    if kind == "shell":
        return shell_unit(
            name,
            _require(entry, "command", where),
            inputs=inputs,
            timeout=entry.get("timeout", DEFAULT_TIMEOUT),
            cwd=entry.get("cwd"),
            check=bool(entry.get("check", True)),
        )
    if kind == "read":
        return file_reader_unit(name, list(entry.get("paths") or []), inputs=inputs)
    if kind == "claude":
        return claude_unit(
            name,
            _require(entry, "prompt", where),
            inputs=inputs,
            model=entry.get("model", DEFAULT_MODEL),
            max_tokens=int(entry.get("max_tokens", DEFAULT_MAX_TOKENS)),
            system=entry.get("system"),
        )
    if kind == "delay":
        return delay(float(_require(entry, "seconds", where)), name=name)
    if kind == "emit":
        return emit(str(_require(entry, "message", where)), name=name, inputs=inputs)
    if kind == "group":
        mode = entry.get("mode", Mode.SEQUENTIAL.value)
        try:
            mode = Mode(mode)
        except ValueError:
            raise ValueError(f"{where}: unknown mode {mode!r}") from None
        return Group(
            name=name,
            nodes=build_nodes(_require(entry, "nodes", where), where),
            mode=mode,
            description=entry.get("description", ""),
        )
    # subflow
    return Subflow.of(
        name,
        build_nodes(_require(entry, "nodes", where), where),
        description=entry.get("description", ""),
    )


def build_nodes(entries: list[Any], where: str = "workflow") -> list[Node]:
    if not isinstance(entries, list):
        raise ValueError(f"{where}: 'nodes' must be a list")
    return [build_node(e, f"{where} node {i}") for i, e in enumerate(entries)]


def load_workflow_text(text: str) -> Workflow:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid workflow YAML: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Workflow definition must be a mapping")

    name = str(_require(data, "name", "workflow"))
    return Workflow(
        name,
        build_nodes(_require(data, "nodes", "workflow")),
        description=data.get("description", ""),
    )


def load_workflow(path: str) -> Workflow:
    """Parse a workflow YAML file."""
    return load_workflow_text(Path(path).read_text())
