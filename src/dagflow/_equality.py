"""Equality predicates deciding whether a node's new value is a change."""

import math
from collections.abc import Callable
from typing import Any, TypeAlias

EqualityPredicate: TypeAlias = Callable[[Any, Any], bool]

# Immutable scalar types compared by value rather than identity.
_SCALAR_TYPES = (bool, int, float, complex, str, bytes)


def same_value(a: Any, b: Any) -> bool:
    """Compare two values by identity, or by value for immutable scalars.

    Containers and other objects are never traversed: two distinct lists with
    equal contents are different values. Scalars of the same type compare by
    value, with ``nan`` equal to itself and ``0.0`` distinct from ``-0.0``.

    Example:
        >>> same_value(1.5, 1.5)
        True
        >>> same_value([1], [1])
        False
        >>> same_value(float("nan"), float("nan"))
        True

    """
    if a is b:
        return True
    if type(a) is not type(b) or not isinstance(a, _SCALAR_TYPES):
        return False
    if isinstance(a, float):
        if math.isnan(a) and math.isnan(b):
            return True
        if a == 0.0 and b == 0.0:
            return math.copysign(1.0, a) == math.copysign(1.0, b)
    return a == b


def equal(a: Any, b: Any) -> bool:
    """Compare two values with ``==`` (structural for builtin containers)."""
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        # Array-like objects may refuse to collapse to a single bool.
        return a is b


_PREDICATES: dict[str, EqualityPredicate] = {
    "same_value": same_value,
    "equal": equal,
}


def resolve_equality(name: str) -> EqualityPredicate:
    """Look up an equality predicate by its configuration name.

    Raises:
        KeyError: If no predicate has that name.

    """
    try:
        return _PREDICATES[name]
    except KeyError:
        msg = f"Unknown equality predicate {name!r}, expected one of {sorted(_PREDICATES)}"
        raise KeyError(msg) from None
