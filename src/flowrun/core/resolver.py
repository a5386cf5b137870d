"""Input bindings: literal values and ``{node.key}`` references.

References are parsed once when a unit is built and looked up against the
output store when the unit starts.
"""

import re
from dataclasses import dataclass
from typing import Any, TypeVar

from flowrun.core.errors import InputResolutionFailed
from flowrun.core.store import OutputStore

T = TypeVar("T")

_REFERENCE_RE = re.compile(r"^\{([^{}.]+)\.([^{}]+)\}$")
_PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")


@dataclass(frozen=True)
class Ref:
    """A pointer to another node's output, ``node.key``."""

    node: str
    key: str

    @classmethod
    def parse(cls, text: str) -> "Ref":
        """Parse ``"node.key"`` or ``"{node.key}"``.

        Only the first dot separates node from key, so ``"S.Inner.value"``
        addresses key ``Inner.value`` of subflow ``S``.
        """
        body = text[1:-1] if text.startswith("{") and text.endswith("}") else text
        node, sep, key = body.partition(".")
        if not sep or not node or not key or "{" in body or "}" in body:
            raise ValueError(f"Invalid reference {text!r}: expected 'node.key'")
        return cls(node=node.strip(), key=key.strip())

    @property
    def path(self) -> str:
        return f"{self.node}.{self.key}"

    def __str__(self) -> str:
        return "{" + self.path + "}"


def ref(path: str) -> Ref:
    return Ref.parse(path)


def is_reference(value: Any) -> bool:
    return isinstance(value, str) and _REFERENCE_RE.match(value) is not None


def parse_bindings(inputs: dict[str, Any] | None) -> dict[str, Any]:
    """Turn reference strings into :class:`Ref` objects; leave literals alone."""
    bindings: dict[str, Any] = {}
    for key, value in (inputs or {}).items():
        if is_reference(value):
            bindings[key] = Ref.parse(value)
        else:
            bindings[key] = value
    return bindings


class Inputs(dict):
    """Concrete inputs handed to a unit's computation.

    A plain dict, plus the two-tier lookup units use for optional inputs.
    """

    def __init__(self, data: dict[str, Any] | None = None, *, unit: str = "") -> None:
        super().__init__(data or {})
        self.unit = unit

    def resolve(self, key: str, fallback: T) -> T:
        """Bound value if present and of *fallback*'s type, otherwise *fallback*.

        A ``None`` fallback accepts a bound value of any type.
        """
        value = self.get(key)
        if value is None:
            return fallback
        if fallback is not None and not isinstance(value, type(fallback)):
            return fallback
        return value

    def require(self, key: str, reason: str = "Required input not found") -> Any:
        if self.get(key) is None:
            raise InputResolutionFailed(self.unit, key, reason)
        return self[key]

    def render(self, template: str) -> str:
        """Fill ``{name}`` placeholders from these inputs; unknown ones stay as-is."""

        def _replace(match: re.Match[str]) -> str:
            name = match.group(1)
            if name in self:
                return str(self[name])
            return match.group(0)

        return _PLACEHOLDER_RE.sub(_replace, template)


def resolve_inputs(unit: str, bindings: dict[str, Any], store: OutputStore) -> Inputs:
    """Produce the inputs *unit* sees right now.

    A reference to a key nobody wrote is left out, not set to ``None``.
    """
    resolved: dict[str, Any] = {}
    for key, value in bindings.items():
        if isinstance(value, Ref):
            if value.path in store:
                resolved[key] = store.get(value.path)
        else:
            resolved[key] = value
    return Inputs(resolved, unit=unit)
