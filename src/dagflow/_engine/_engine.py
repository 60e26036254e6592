"""Propagation engine scheduling re-evaluation of a dataflow graph."""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from typing import TYPE_CHECKING, Any, Self

from dagflow._context import get_active_run, reset_active_run, set_active_run
from dagflow._equality import same_value
from dagflow._errors import NodeExecutionError, PendingValueError
from dagflow._graph import GraphRegistry

from ._queue import UpdateBatch, UpdateQueue
from ._store import ValueStore

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from dagflow._config import DataflowSettings
    from dagflow._equality import EqualityPredicate
    from dagflow._graph import NodeSpec

logger = logging.getLogger(__name__)


class Dataflow:
    """A graph of named node functions that re-evaluates on upstream changes.

    Each node function receives the current values of its upstream nodes as
    positional arguments. Setting values propagates the change downstream,
    one wavefront of independent nodes at a time; node functions may be
    plain callables or coroutine functions.

    Before reading any values, let the propagation complete by awaiting
    :meth:`set`:

        >>> flow = Dataflow({"out": lambda x, y: x + y})
        >>> await flow.set({"x": 1, "y": 2})
        >>> flow.values["out"]
        3

    Args:
        nodes: Node functions to define, as ``{name: function}``.
        is_equal: Predicate deciding whether a new value is unchanged from
            the cached one. Unchanged values do not trigger downstream
            re-evaluation.
        max_concurrency: Maximum number of node functions running at once
            within a wavefront. None means no limit.

    """

    def __init__(
        self,
        nodes: Mapping[str, Callable[..., Any]] | None = None,
        *,
        is_equal: EqualityPredicate = same_value,
        max_concurrency: int | None = None,
    ) -> None:
        if max_concurrency is not None and max_concurrency < 1:
            msg = f"max_concurrency must be a positive integer or None, got {max_concurrency}"
            raise ValueError(msg)

        self._registry = GraphRegistry()
        self._store = ValueStore(is_equal)
        self._queue = UpdateQueue()
        self._is_equal = is_equal
        self._max_concurrency = max_concurrency
        self._errors: list[NodeExecutionError] = []

        # Transient per-batch state
        self._dirty_counts: dict[str, int] = {}

        # Run state: at most one run drains the queue at a time
        self._running = False
        self._run: object | None = None
        self._waiters: list[asyncio.Future[None]] = []

        if nodes:
            self.define(nodes)

    @classmethod
    def from_config(
        cls,
        settings: DataflowSettings,
        nodes: Mapping[str, Callable[..., Any]] | None = None,
    ) -> Self:
        """Create a dataflow configured from loaded settings."""
        return cls(nodes, is_equal=settings.is_equal, max_concurrency=settings.max_concurrency)

    # -- Graph -----------------------------------------------------------------

    def define(self, nodes: Mapping[str, Callable[..., Any]]) -> Self:
        """Define node functions on the graph.

            >>> flow.define({"out": lambda x, y: x + y})

        The upstream dependencies of each node are the positional parameter
        names of its function, or the names given to :func:`dagflow.depends`.

        Args:
            nodes: Mapping of node names to node functions.

        Returns:
            This dataflow, for chaining.

        Raises:
            DuplicateNodeError: If a name is already defined.
            NotCallableError: If a value is not callable.

        """
        self._registry.define_all(nodes)
        return self

    @property
    def nodes(self) -> tuple[str, ...]:
        """Names of the defined function nodes."""
        return self._registry.nodes

    @property
    def inputs(self) -> tuple[str, ...]:
        """Names used as dependencies that are not defined as functions."""
        return self._registry.inputs

    def node(self, name: str) -> NodeSpec:
        """Get the spec of a node (INPUT or FUNCTION)."""
        return self._registry.get(name)

    def upstream(self, name: str) -> tuple[str, ...]:
        """Get the upstream names of a node, in argument order."""
        return self._registry.upstream(name)

    def downstream(self, name: str) -> tuple[str, ...]:
        """Get the names of the nodes that depend directly on a node."""
        return self._registry.downstream(name)

    @property
    def registry(self) -> GraphRegistry:
        """The underlying graph registry."""
        return self._registry

    # -- Values ----------------------------------------------------------------

    @property
    def values(self) -> Mapping[str, Any]:
        """Read-only view of the last value of every node.

        Await :meth:`set` before reading, so that propagation has settled:

            >>> await flow.set({"x": 40})
            >>> flow.values

        """
        return self._store.values

    @property
    def errors(self) -> tuple[NodeExecutionError, ...]:
        """Failures of node functions during the most recent processing run.

        A failing node stops propagation into its downstream nodes for that
        batch. Every call to :meth:`set` that starts a run clears the log,
        including ``set()`` without values and :meth:`get`, so read this
        right after awaiting the ``set`` whose failures you are after.
        """
        return tuple(self._errors)

    @property
    def is_running(self) -> bool:
        """Whether a processing run is currently draining the update queue."""
        return self._running

    async def get(self, name: str) -> Any:
        """Return the value of a node once propagation has settled.

            >>> result = await flow.get("out")

        Returns:
            The node's value, or None if it was never set or computed.

        """
        await self.set()
        return self._store.get(name)

    async def set(self, update: Mapping[str, Any] | None = None) -> Self:
        """Set values of nodes and propagate the changes downstream.

            >>> await flow.set({"x": 1, "y": 2})

        Call without arguments to wait for any ongoing propagation to settle.

        Updates are queued, so a node function may call ``set`` itself; the
        nested batch is processed after the current one, before the outer
        ``set`` returns. A call made from another task while a run is active
        waits until that run has drained the queue.

        Args:
            update: Mapping of node names to their new, fully resolved values.

        Returns:
            This dataflow, once the propagation has settled.

        Raises:
            CycleDetectedError: If the graph reachable from an updated node
                contains a cycle.
            PendingValueError: If a value is an awaitable.

        """
        batch = UpdateBatch.of(update)

        if not self._running:
            self._queue.push(batch)
            await self._drain()
            return self

        if batch:
            self._queue.push(batch)

        if get_active_run() is self._run:
            # Issued by a node function of the active run: waiting here would
            # block the wavefront that is running that very function.
            logger.debug("Queued dynamic batch %s", batch.names)
            return self

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        await waiter
        return self

    # -- Processing ------------------------------------------------------------

    async def _drain(self) -> None:
        """Process queued batches until the queue is empty."""
        self._running = True
        self._run = run = object()
        token = set_active_run(run)
        self._errors = []
        logger.debug("Dataflow started")

        try:
            while self._queue:
                await self._process_batch(self._queue.pop())
                if self._queue:
                    logger.debug("Starting next dynamic dataflow batch")
        except BaseException as e:
            discarded = self._queue.clear()
            if discarded:
                logger.debug("Discarding %d queued batch(es) after failure", len(discarded))
            self._finish(e)
            raise
        else:
            self._finish(None)
        finally:
            reset_active_run(token)
            self._dirty_counts = {}
            self._running = False
            self._run = None

        logger.debug("Dataflow ended")

    def _finish(self, error: BaseException | None) -> None:
        """Release every caller waiting on the current run."""
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if waiter.done():
                continue
            if error is None:
                waiter.set_result(None)
            elif isinstance(error, asyncio.CancelledError):
                waiter.cancel()
            else:
                waiter.set_exception(error)

    async def _process_batch(self, batch: UpdateBatch) -> None:
        logger.debug("Processing batch %s", batch.names)

        # Count the activated upstream edges of every reachable node
        self._dirty_counts = self._registry.count_dirty(batch.names)

        for name, value in batch.values.items():
            if inspect.isawaitable(value):
                raise PendingValueError(name, value)

        self._store.reset_changed()

        dirty: dict[str, None] = {}
        for name, value in batch.values.items():
            self._store.update(name, value)
            # A name also reached from another name of this batch is recomputed
            # in its own wavefront, which releases its dependents then.
            if self._dirty_counts.get(name, 0) == 0:
                self._release_downstream(name, dirty)

        while dirty:
            dirty = await self._run_wavefront(list(dirty))

    async def _run_wavefront(self, names: list[str]) -> dict[str, None]:
        """Evaluate one wavefront of ready nodes and return the next one."""
        limiter = (
            asyncio.Semaphore(self._max_concurrency)
            if self._max_concurrency is not None
            else contextlib.nullcontext()
        )

        calls: list[tuple[str, tuple[Any, ...], bool]] = []
        pending = []
        for name in names:
            upstream = self._registry.upstream(name)
            args = self._store.gather(upstream)
            invoked = self._store.any_changed(upstream)
            calls.append((name, args, invoked))
            if invoked:
                logger.debug("Calling %s%r", name, args)
                pending.append(self._invoke(self._registry.function(name), args, limiter))

        # Wait for every call to settle, running them concurrently
        results = iter(await asyncio.gather(*pending, return_exceptions=True))

        ready: dict[str, None] = {}
        for name, args, invoked in calls:
            if not invoked:
                # No input changed: keep the cached value but still release
                # dependents, so their counts reach zero.
                logger.debug("Skipping %s (inputs unchanged)", name)
                self._store.mark_unchanged(name)
                self._release_downstream(name, ready)
                continue

            result = next(results)
            if isinstance(result, BaseException):
                self._record_failure(name, args, result)
                continue

            self._store.update(name, result)
            self._release_downstream(name, ready)

        return ready

    @staticmethod
    async def _invoke(
        fn: Callable[..., Any] | None,
        args: tuple[Any, ...],
        limiter: contextlib.AbstractAsyncContextManager[Any],
    ) -> Any:
        if fn is None:
            msg = "Input nodes have no function to call"
            raise TypeError(msg)
        async with limiter:
            result = fn(*args)
            if inspect.isawaitable(result):
                result = await result
            return result

    def _release_downstream(self, name: str, ready: dict[str, None]) -> None:
        """Resolve one pending dependency of each node downstream of ``name``."""
        for downstream_name in self._registry.downstream(name):
            remaining = self._dirty_counts.get(downstream_name, 0) - 1
            self._dirty_counts[downstream_name] = remaining
            if remaining == 0:
                ready[downstream_name] = None

    def _record_failure(self, name: str, args: tuple[Any, ...], reason: BaseException) -> None:
        # Dependents are not released: the failed node's subtree is skipped for this batch.
        failure = NodeExecutionError(node_name=name, args=args, reason=reason)
        logger.warning("Error executing node %r with arguments %r: %r", name, args, reason)
        self._errors.append(failure)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(nodes={list(self.nodes)!r}, values={dict(self.values)!r})"
