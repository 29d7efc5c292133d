"""
Lifecycle hook points.

Record types declare their callbacks as a class attribute mapping a fixed
hook point to an ordered list of callables (or names of record methods):

    class Post(Record):
        callbacks = {
            "before_save": ["strip_title"],
            "after_create": [notify_followers],
        }

Callbacks of a parent type run before the subclass's own. A `before_*`
callback returning ``False`` aborts the operation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

if TYPE_CHECKING:  # pragma: no cover
    from parse_resource.orm.base import Record

OPERATIONS = ("save", "create", "update", "destroy")
HOOK_POINTS = tuple(f"{when}_{operation}" for operation in OPERATIONS for when in ("before", "after"))

Callback = Union[str, Callable[["Record"], Any]]


@dataclass(frozen=True)
class HookTable:
    """Ordered callbacks per hook point for one record type."""

    callbacks: Mapping[str, Tuple[Callback, ...]] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        declared: Optional[Mapping[str, Sequence[Callback]]],
        inherited: Optional["HookTable"] = None,
    ) -> "HookTable":
        unknown = set(declared or {}) - set(HOOK_POINTS)
        if unknown:
            raise TypeError(
                f"Unknown hook point(s) {sorted(unknown)}; expected one of {list(HOOK_POINTS)}"
            )
        merged: Dict[str, Tuple[Callback, ...]] = dict(inherited.callbacks if inherited else {})
        for point, callbacks in (declared or {}).items():
            if isinstance(callbacks, str) or callable(callbacks):
                callbacks = (callbacks,)
            merged[point] = merged.get(point, ()) + tuple(callbacks)
        return cls(callbacks=merged)

    def _call(self, point: str, record: "Record") -> Any:
        result = None
        for callback in self.callbacks.get(point, ()):
            if isinstance(callback, str):
                result = getattr(record, callback)()
            else:
                result = callback(record)
            if result is False:
                return False
        return result

    def run_before(self, operation: str, record: "Record") -> bool:
        """Run `before_<operation>` callbacks; False means the operation must not proceed."""
        return self._call(f"before_{operation}", record) is not False

    def run_after(self, operation: str, record: "Record") -> None:
        self._call(f"after_{operation}", record)


__all__ = ["HOOK_POINTS", "HookTable", "OPERATIONS"]
