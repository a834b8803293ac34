"""Completion callbacks bound to the active wait.

Each factory must be called inside run_with_timeout. The callback it returns
can be handed to anything that fires callbacks on the loop: ``call_soon``,
``call_later``, ``Future.add_done_callback`` or a protocol method.
"""

from __future__ import annotations

import logging
import weakref
from typing import Any, Callable, Optional, Tuple

from .scope import WaitScope, require_active

logger = logging.getLogger(__name__)

Apply = Callable[[WaitScope, Tuple[Any, ...]], None]


class Callback:
    """Callable that resolves or counts down the wait it was created in.

    Fixed arguments given at creation come before the arguments of each call.
    Once the wait is over the callback does nothing except log a warning;
    it never raises into the loop that fired it.
    """

    __slots__ = ("_kind", "_scope", "_apply", "_fixed")

    def __init__(
        self,
        kind: str,
        scope: WaitScope,
        apply: Apply,
        fixed: Tuple[Any, ...] = (),
    ) -> None:
        """Bind a callback to ``scope``.

        Args:
            kind: Label used in diagnostics.
            scope: Scope that is active right now.
            apply: Action run against the scope with the combined arguments.
            fixed: Arguments prepended to every call.
        """
        self._kind = kind
        self._scope = weakref.ref(scope)
        self._apply = apply
        self._fixed = tuple(fixed)

    @property
    def kind(self) -> str:
        """Label of the callback, e.g. ``send`` or ``fail``."""
        return self._kind

    @property
    def fixed_args(self) -> Tuple[Any, ...]:
        """Arguments bound at creation time."""
        return self._fixed

    @property
    def alive(self) -> bool:
        """Whether the owning wait is still in progress."""
        scope = self._scope()
        return scope is not None and scope.active

    def __call__(self, *args: Any) -> None:
        """Apply the callback to its wait, or warn if the wait is over.

        Args:
            *args: Call-time arguments, appended after the fixed ones.
        """
        scope = self._scope()
        if scope is None or not scope.active:
            logger.warning("%s callback called outside run_with_timeout", self._kind)
            return
        self._apply(scope, self._fixed + args)

    def __repr__(self) -> str:
        """Return a short description for debugging."""
        state = "alive" if self.alive else "stale"
        return f"<Callback {self._kind} {state}>"


def _send(scope: WaitScope, values: Tuple[Any, ...]) -> None:
    """Resolve ``scope`` successfully with all values."""
    scope.send(*values)


def _fail(scope: WaitScope, values: Tuple[Any, ...]) -> None:
    """Fail ``scope`` with the first value as the reason."""
    scope.fail(values[0] if values else None)


def _end(scope: WaitScope, values: Tuple[Any, ...]) -> None:
    """Count ``scope`` down; call-time values are ignored."""
    scope.end()


def send_callback(*fixed: Any) -> Callback:
    """Create a callback that ends the wait successfully.

    ``run_with_timeout`` returns the first value passed to it and
    ``last_values()`` exposes all of them.

    Args:
        *fixed: Values prepended to the callback's arguments.

    Raises:
        NoActiveScopeError: If called outside run_with_timeout.
    """
    return Callback("send", require_active("send_callback"), _send, fixed)


def fail_callback(*fixed: Any) -> Callback:
    """Create a callback that ends the wait with an error.

    The first fixed argument, or else the first call-time argument, is the
    reason. Exceptions are raised as they are; other values are wrapped in
    ExplicitFailureError.

    Args:
        *fixed: Values prepended to the callback's arguments.

    Raises:
        NoActiveScopeError: If called outside run_with_timeout.
    """
    return Callback("fail", require_active("fail_callback"), _fail, fixed)


def end_callback() -> Callback:
    """Create a callback matching one begin() call.

    Raises:
        NoActiveScopeError: If called outside run_with_timeout.
    """
    return Callback("end", require_active("end_callback"), _end)


def begin(on_zero: Optional[Callable[[], Any]] = None) -> None:
    """Increment the gate counter of the active wait right away.

    When matching end callbacks bring the counter back to zero, ``on_zero``
    runs if given; otherwise the wait ends successfully with no value. An
    ``on_zero`` that wants to stop the wait should call a send callback.

    Args:
        on_zero: Optional callable run when the counter reaches zero.

    Raises:
        NoActiveScopeError: If called outside run_with_timeout.
    """
    require_active("begin").begin(on_zero)
