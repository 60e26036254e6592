"""Propagation engine module for dagflow.

This module schedules re-evaluation of a dataflow graph when node values
change. Updates are queued as batches and drained by a single active run,
which executes ready nodes wavefront by wavefront.

Key types:
- Dataflow: The public graph object (define/set/get/values/errors)
- ValueStore: Cached node values and per-batch changed-flags
- UpdateQueue / UpdateBatch: FIFO of pending updates
"""

from ._engine import Dataflow
from ._queue import UpdateBatch, UpdateQueue
from ._store import ValueStore

__all__ = [
    "Dataflow",
    "UpdateBatch",
    "UpdateQueue",
    "ValueStore",
]
