"""The single wait scope shared by run_with_timeout and its callbacks.

Only one scope may be active per process. Callbacks keep a weak reference to
the scope they were created in and check ``active`` on every call, so a
callback fired after its wait is over cannot touch a later wait.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from .exceptions import ExplicitFailureError, NestedRecvError, NoActiveScopeError

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Failure callback invoked without a reason"

_generations = itertools.count(1)

# The scope currently waiting, if any.
_active: Optional["WaitScope"] = None
# The most recent scope; goal accessors read it after the wait is over.
_latest: Optional["WaitScope"] = None


class WaitScope:
    """Coordination state for one run_with_timeout call.

    Attributes:
        generation: Sequence number of the call, used in diagnostics.
        active: True until the owning call returns or raises.
        counter: Outstanding begin() calls not yet matched by an end.
        pending: Goal names still waiting, in registration order.
        results: Argument lists recorded by completed goals.
        values: Values passed to the winning send, if any.
    """

    __slots__ = (
        "generation",
        "active",
        "counter",
        "pending",
        "results",
        "values",
        "_future",
        "_on_zero",
        "__weakref__",
    )

    def __init__(self, future: "asyncio.Future[Tuple[Any, ...]]") -> None:
        """Create an active scope resolved through ``future``.

        Args:
            future: Single-resolution future the owning call awaits.
        """
        self.generation = next(_generations)
        self.active = True
        self.counter = 0
        self.pending: Dict[str, bool] = {}
        self.results: Dict[str, List[Any]] = {}
        self.values: Tuple[Any, ...] = ()
        self._future = future
        self._on_zero: Optional[Callable[[], Any]] = None

    @property
    def resolved(self) -> bool:
        """Whether a send or failure already won."""
        return self._future.done()

    def send(self, *values: Any) -> None:
        """Resolve successfully with ``values``; later resolutions are ignored.

        Args:
            *values: Values handed back to the waiting call.
        """
        if self._future.done():
            logger.debug("wait #%d already resolved, send ignored", self.generation)
            return
        self.values = values
        self._future.set_result(values)

    def fail(self, reason: Any = None) -> None:
        """Resolve with a failure; later resolutions are ignored.

        Args:
            reason: Exception to raise, or a value wrapped in ExplicitFailureError.
        """
        if self._future.done():
            logger.debug("wait #%d already resolved, failure ignored", self.generation)
            return
        if reason is None:
            reason = DEFAULT_FAILURE_MESSAGE
        if not isinstance(reason, BaseException):
            reason = ExplicitFailureError(reason)
        self._future.set_exception(reason)

    def begin(self, on_zero: Optional[Callable[[], Any]] = None) -> None:
        """Open one more obligation on the gate counter.

        Args:
            on_zero: Called instead of a plain send when the counter drops to zero.
        """
        self.counter += 1
        if on_zero is not None:
            self._on_zero = on_zero

    def end(self) -> None:
        """Close one obligation, firing the gate when none are left."""
        if self._future.done():
            logger.warning(
                "end callback called after wait #%d resolved", self.generation
            )
            return
        if self.counter == 0:
            logger.warning(
                "end callback called without a matching begin (wait #%d)",
                self.generation,
            )
            return
        self.counter -= 1
        if self.counter:
            return
        if self._on_zero is None:
            self.send()
            return
        try:
            self._on_zero()
        except Exception as exc:
            self.fail(exc)

    def register_goal(self, name: str) -> None:
        """Mark ``name`` as pending unless it already has a result.

        Args:
            name: Goal name.
        """
        if name not in self.results:
            self.pending[name] = True

    def complete_goal(self, name: str, values: Tuple[Any, ...]) -> None:
        """Record the first result for ``name`` and send once nothing is pending.

        Args:
            name: Goal name.
            values: Fixed arguments followed by the callback's own arguments.
        """
        if self._future.done():
            logger.warning(
                "goal %r completed after wait #%d resolved", name, self.generation
            )
            return
        if name not in self.results:
            self.results[name] = list(values)
            self.pending.pop(name, None)
        if not self.pending:
            self.send(dict(self.results))

    async def wait(self) -> Tuple[Any, ...]:
        """Suspend until the scope resolves.

        Returns:
            The values of the winning send.
        """
        return await self._future

    def close(self) -> None:
        """Deactivate the scope and release its future."""
        self.active = False
        self._on_zero = None
        if not self._future.done():
            self._future.cancel()
        elif not self._future.cancelled():
            # Mark a failure nobody awaited as retrieved.
            self._future.exception()

    def __repr__(self) -> str:
        """Return a short description for debugging."""
        state = "active" if self.active else "closed"
        return f"<WaitScope #{self.generation} {state} counter={self.counter}>"


def ensure_idle() -> None:
    """Raise NestedRecvError when a wait is already in progress."""
    if _active is not None:
        raise NestedRecvError()


def activate(loop: asyncio.AbstractEventLoop) -> WaitScope:
    """Create the process-wide scope for a new wait.

    Args:
        loop: Loop the wait runs on.

    Returns:
        The freshly activated scope.

    Raises:
        NestedRecvError: If another scope is still active.
    """
    global _active, _latest
    ensure_idle()
    scope = WaitScope(loop.create_future())
    _active = _latest = scope
    logger.debug("wait #%d started", scope.generation)
    return scope


def deactivate(scope: WaitScope) -> None:
    """Close ``scope`` and free the process-wide slot.

    Args:
        scope: Scope returned by activate().
    """
    global _active
    scope.close()
    if _active is scope:
        _active = None
    logger.debug("wait #%d finished", scope.generation)


def require_active(operation: str) -> WaitScope:
    """Return the active scope.

    Args:
        operation: Name reported when there is no active scope.

    Raises:
        NoActiveScopeError: If called outside run_with_timeout.
    """
    if _active is None:
        raise NoActiveScopeError(operation)
    return _active


def latest_scope() -> Optional[WaitScope]:
    """Return the scope of the most recent wait, active or not."""
    return _latest
