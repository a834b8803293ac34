"""Entry points that run a body and wait for one of its callbacks to resolve."""

from __future__ import annotations

import asyncio
import math
import numbers
from decimal import Decimal
from typing import Any, Callable, Optional, Tuple

from .exceptions import AdHocError, InvalidTimeoutError, RecvTimeoutError
from .options import AdHocOptions
from .scope import activate, deactivate, ensure_idle, latest_scope
from .telemetry import wait_span

Body = Callable[[], Any]


def _check_timeout(timeout: Any) -> float:
    """Validate ``timeout`` and return it as a float.

    Raises:
        InvalidTimeoutError: If the timeout is zero, NaN or not a real number.
    """
    if isinstance(timeout, bool) or not isinstance(timeout, (numbers.Real, Decimal)):
        raise InvalidTimeoutError(timeout)
    try:
        seconds = float(timeout)
    except OverflowError:
        seconds = math.inf if timeout > 0 else -math.inf
    except ValueError:
        raise InvalidTimeoutError(timeout) from None
    if math.isnan(seconds) or seconds == 0:
        raise InvalidTimeoutError(timeout)
    return seconds


def _outcome(exc: BaseException) -> str:
    """Name how a wait ended for telemetry."""
    if isinstance(exc, RecvTimeoutError):
        return "timeout"
    if isinstance(exc, asyncio.CancelledError):
        return "cancelled"
    return "failed"


async def run_with_timeout_async(body: Body, timeout: float) -> Any:
    """Run ``body`` on the running loop and wait until the wait resolves.

    ``body`` is called synchronously and should hand callbacks from
    send_callback(), fail_callback(), end_callback() or goal() to the loop.

    Args:
        body: Callable that sets up the asynchronous work.
        timeout: Seconds to wait. Negative waits forever; zero is rejected.

    Returns:
        The first value passed to the winning send, or None.

    Raises:
        NestedRecvError: If another wait is in progress.
        InvalidTimeoutError: If ``timeout`` is zero or not a number.
        RecvTimeoutError: If the timer fired first.
        ExplicitFailureError: If a failure callback fired with a non-exception reason.
    """
    ensure_idle()
    timeout = _check_timeout(timeout)
    loop = asyncio.get_running_loop()

    with wait_span(timeout) as span:
        scope = activate(loop)
        timer: Optional[asyncio.TimerHandle] = None
        try:
            if 0 < timeout < math.inf:
                timer = loop.call_later(
                    timeout, scope.fail, RecvTimeoutError(timeout)
                )
            body()
            values = await scope.wait()
        except BaseException as exc:
            span.set_attribute("outcome", _outcome(exc))
            raise
        finally:
            if timer is not None:
                timer.cancel()
            deactivate(scope)

        span.set_attribute("outcome", "sent")
        return values[0] if values else None


def run_with_timeout(
    body: Body,
    timeout: Optional[float] = None,
    *,
    options: Optional[AdHocOptions] = None,
) -> Any:
    """Synchronous wrapper around `run_with_timeout_async()`.

    Runs a fresh event loop until the wait resolves. Tasks the body leaves
    behind are cancelled when the loop shuts down.

    Args:
        body: Callable that sets up the asynchronous work.
        timeout: Seconds to wait; falls back to ``options.default_timeout``.
        options: Optional loop configuration.

    Returns:
        The first value passed to the winning send, or None.

    Raises:
        NestedRecvError: If another wait is in progress.
        InvalidTimeoutError: If no usable timeout was given.
        AdHocError: If called from within a running event loop.
    """
    if options is None:
        options = AdHocOptions()

    ensure_idle()
    if timeout is None:
        timeout = options.default_timeout
    timeout = _check_timeout(timeout)

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(
            run_with_timeout_async(body, timeout), debug=options.resolve_debug()
        )

    raise AdHocError(
        "run_with_timeout() cannot be used from a running event loop; "
        "use await run_with_timeout_async()."
    )


def last_values() -> Tuple[Any, ...]:
    """Return every value passed to the winning send of the latest wait."""
    scope = latest_scope()
    if scope is None:
        return ()
    return scope.values
