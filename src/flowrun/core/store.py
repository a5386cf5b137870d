"""OutputStore — flat, namespaced mapping of every output produced in a run."""

from typing import Any, Self, TypeVar

from flowrun.core.errors import InvalidWorkflowState

T = TypeVar("T")

_MISSING = object()


class OutputStore:
    """Key-value store keyed by ``"{node}.{key}"``.

    Only the driver writes to it. A parallel group gives each child its own
    ``branch()``: reads fall through to the parent, writes stay local until
    the driver ``commit``s the branch after the join.
    """

    def __init__(self, initial: dict[str, Any] | None = None, *, parent: "OutputStore | None" = None) -> None:
        self._data: dict[str, Any] = dict(initial) if initial else {}
        self._parent = parent
        self._frozen = False

    def _lookup(self, key: str) -> Any:
        if key in self._data:
            return self._data[key]
        if self._parent is not None:
            return self._parent._lookup(key)
        return _MISSING

    def get(self, key: str, default: Any = None) -> Any:
        value = self._lookup(key)
        return default if value is _MISSING else value

    def get_as(self, key: str, type_: type[T], default: T | None = None) -> T | None:
        """Return the value at *key* if it is an instance of *type_*, else *default*."""
        value = self._lookup(key)
        if value is _MISSING or not isinstance(value, type_):
            return default
        return value

    def set(self, key: str, value: Any) -> None:
        if self._frozen:
            raise InvalidWorkflowState("frozen", "writable")
        self._data[key] = value

    def merge(self, namespace: str, outputs: dict[str, Any]) -> None:
        """Merge a dict of outputs under ``namespace.``."""
        for k, v in outputs.items():
            self.set(f"{namespace}.{k}", v)

    def branch(self) -> Self:
        return type(self)(parent=self)

    def commit(self, branch: "OutputStore") -> None:
        """Copy everything *branch* wrote into this store."""
        for k, v in branch._data.items():
            self.set(k, v)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def snapshot(self) -> dict[str, Any]:
        """Return a shallow copy of all visible data, parent entries included."""
        data = self._parent.snapshot() if self._parent is not None else {}
        data.update(self._data)
        return data

    def __contains__(self, key: str) -> bool:
        return self._lookup(key) is not _MISSING

    def __len__(self) -> int:
        return len(self.snapshot())

    def __repr__(self) -> str:
        return f"OutputStore({self.snapshot()!r})"
