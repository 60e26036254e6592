"""FIFO queue of pending update batches."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True, slots=True)
class UpdateBatch:
    """An immutable mapping of node names to the values set on them."""

    values: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def of(cls, update: Mapping[str, Any] | None) -> UpdateBatch:
        """Snapshot ``update`` into a batch, so later changes to it are not seen."""
        return cls(values=MappingProxyType(dict(update or {})))

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self.values)

    def __len__(self) -> int:
        return len(self.values)


class UpdateQueue:
    """Strict FIFO of pending update batches.

    Batches may be appended while the queue is being drained; the drain loop
    keeps popping until the queue is empty.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: deque[UpdateBatch] = deque()

    def push(self, batch: UpdateBatch) -> None:
        """Add a batch to the tail of the queue."""
        self._items.append(batch)

    def pop(self) -> UpdateBatch:
        """Remove and return the batch at the head of the queue.

        Raises:
            IndexError: If the queue is empty.

        """
        return self._items.popleft()

    def clear(self) -> list[UpdateBatch]:
        """Remove every pending batch, returning them in queue order."""
        pending = list(self._items)
        self._items.clear()
        return pending

    def __iter__(self) -> Iterator[UpdateBatch]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)
