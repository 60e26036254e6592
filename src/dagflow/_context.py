"""Context variables for dagflow.

This module contains context variables used across the library.
It is kept separate to avoid circular imports.
"""

from __future__ import annotations

from contextvars import ContextVar, Token

# Identity of the processing run whose node functions are executing in the
# current context. Tasks spawned for node functions inherit it, which lets a
# nested `Dataflow.set()` recognise that it was issued from inside the run.
_active_run_var: ContextVar[object | None] = ContextVar("active_run", default=None)


def get_active_run() -> object | None:
    """Get the identity of the run executing in this context, if any."""
    return _active_run_var.get()


def set_active_run(run: object | None) -> Token[object | None]:
    """Set the run executing in this context.

    Returns a token that can be used to reset the value.
    """
    return _active_run_var.set(run)


def reset_active_run(token: Token[object | None]) -> None:
    """Reset the active run using a token from set_active_run."""
    _active_run_var.reset(token)
