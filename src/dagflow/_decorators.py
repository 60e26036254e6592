from __future__ import annotations

from typing import TYPE_CHECKING, ParamSpec, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")
P = ParamSpec("P")


def depends(*names: str) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Decorator to declare the upstream nodes of a node function explicitly.

    The names are bound to the function's positional arguments in order, so
    parameter names no longer need to match node names.

    Args:
        *names: Upstream node names, in the order they are passed to the function.

    Example:
        @dagflow.depends("a", "b")
        def difference(x, y):
            return x - y

        flow.define({"d": difference})

    """
    for name in names:
        if not isinstance(name, str) or not name:
            msg = f"depends() requires non-empty node names, got: {name!r}"
            raise TypeError(msg)

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        # HACK: metadata lives on the function object itself, so plain callables
        # can still be passed to Dataflow.define().
        func.__dagflow_depends__ = tuple(names)  # type: ignore[attr-defined]
        return func

    return decorator
