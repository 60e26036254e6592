"""Value store holding the last known value of every node."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from dagflow._equality import EqualityPredicate

logger = logging.getLogger(__name__)


class ValueStore:
    """Cached node values plus the changed-flags of the batch being processed.

    A name absent from the store has never been set or computed. Reading it
    yields None, but the first value written to it always counts as a change.
    """

    __slots__ = ("_changed", "_is_equal", "_values")

    def __init__(self, is_equal: EqualityPredicate) -> None:
        self._is_equal = is_equal
        self._values: dict[str, Any] = {}
        self._changed: dict[str, bool] = {}

    @property
    def values(self) -> Mapping[str, Any]:
        """Read-only live view of the stored values."""
        return MappingProxyType(self._values)

    def get(self, name: str) -> Any:
        """Get the stored value of ``name``, or None if it has none."""
        return self._values.get(name)

    def gather(self, names: Iterable[str]) -> tuple[Any, ...]:
        """Get the stored values of ``names``, in order."""
        return tuple(self._values.get(name) for name in names)

    def update(self, name: str, value: Any) -> bool:
        """Store ``value`` for ``name`` if it differs from the cached one.

        The comparison uses the store's equality predicate. The result is
        recorded as the name's changed-flag for the current batch.

        Returns:
            True if the value changed.

        """
        changed = name not in self._values or not self._is_equal(self._values[name], value)
        self._changed[name] = changed
        if changed:
            logger.debug("Setting %s = %r", name, value)
            self._values[name] = value
        return changed

    def mark_unchanged(self, name: str) -> None:
        """Record that ``name`` settled without being recomputed in the current batch.

        A change already recorded for ``name`` in this batch (a value set
        directly on it) is kept.
        """
        self._changed.setdefault(name, False)

    def changed(self, name: str) -> bool:
        """Check if ``name`` changed in the current batch."""
        return self._changed.get(name, False)

    def any_changed(self, names: Iterable[str]) -> bool:
        """Check if at least one of ``names`` changed in the current batch."""
        return any(self._changed.get(name, False) for name in names)

    def reset_changed(self) -> None:
        """Forget the changed-flags of the previous batch."""
        self._changed = {}

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)
