"""Effect drivers shared by the synchronous and asynchronous compilers.

Resolution and orchestration logic is written once, as generators that
yield ``Call`` effects instead of invoking importers, evaluators or
serializers directly. A driver executes each effect and sends the outcome
back into the generator:

- ``run_sync`` calls the effect inline and refuses awaitable outcomes.
- ``run_async`` calls the effect and awaits it if it returned an awaitable.

Because both drivers feed the same generator, the two execution modes share
every decision (ordering, caching, error wrapping) and differ only at the
points where the asynchronous mode may suspend.

Example:
    >>> def plan():
    ...     value = yield Call(len, ("abc",))
    ...     return value * 2
    >>> run_sync(plan())
    6
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from typing import Any, TypeVar

T = TypeVar("T")

Steps = Generator["Call", Any, T]
"""A generator of effects returning ``T``."""


class AwaitableInSyncModeError(TypeError):
    """Raised by ``run_sync`` when an effect returned an awaitable.

    Attributes:
        call: The effect that produced the awaitable.
    """

    def __init__(self, call: Call) -> None:
        """Initialize with the offending effect.

        Args:
            call: The effect that produced the awaitable.
        """
        self.call = call
        super().__init__(f"{call.describe()} returned an awaitable in synchronous mode")


@dataclass(frozen=True)
class Call:
    """A deferred call executed by a driver.

    Attributes:
        fn: The callable to invoke.
        args: Positional arguments.
        kwargs: Keyword arguments.
    """

    fn: Callable[..., Any]
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def invoke(self) -> Any:
        """Invoke the callable and return its raw outcome."""
        return self.fn(*self.args, **self.kwargs)

    def describe(self) -> str:
        """Short name of the callable, for error messages."""
        return getattr(self.fn, "__qualname__", None) or repr(self.fn)


def run_sync(steps: Steps[T]) -> T:
    """Drive ``steps`` to completion on the calling thread.

    Args:
        steps: Generator of effects.

    Returns:
        The generator's return value.

    Raises:
        AwaitableInSyncModeError: If an effect returned an awaitable; the
            error is first thrown into the generator so it can translate it.
    """
    try:
        call = next(steps)
        while True:
            try:
                outcome = call.invoke()
                if inspect.isawaitable(outcome):
                    _discard(outcome)
                    raise AwaitableInSyncModeError(call)
            except Exception as exc:
                call = steps.throw(exc)
            else:
                call = steps.send(outcome)
    except StopIteration as stop:
        return stop.value  # type: ignore[no-any-return]
    finally:
        steps.close()


async def run_async(steps: Steps[T]) -> T:
    """Drive ``steps`` to completion, awaiting awaitable outcomes.

    Cancellation of the awaiting task propagates out unchanged; the generator
    is closed so its ``finally`` blocks run.

    Args:
        steps: Generator of effects.

    Returns:
        The generator's return value.
    """
    try:
        call = next(steps)
        while True:
            try:
                outcome = call.invoke()
                if inspect.isawaitable(outcome):
                    outcome = await outcome
            except Exception as exc:
                call = steps.throw(exc)
            else:
                call = steps.send(outcome)
    except StopIteration as stop:
        return stop.value  # type: ignore[no-any-return]
    finally:
        steps.close()


def _discard(awaitable: Any) -> None:
    """Close an un-awaited coroutine so it does not warn on collection."""
    close = getattr(awaitable, "close", None)
    if callable(close):
        close()


__all__ = ["AwaitableInSyncModeError", "Call", "Steps", "run_async", "run_sync"]
