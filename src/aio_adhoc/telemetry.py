"""Optional Logfire instrumentation around run_with_timeout."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional

SPAN_NAME = "aio_adhoc.run_with_timeout"


class _NullSpan:
    """Stand-in span used when Logfire is not active."""

    def set_attribute(self, key: str, value: Any) -> None:
        """Discard the attribute.

        Args:
            key: Attribute name.
            value: Attribute value.
        """


_NULL_SPAN = _NullSpan()


def _maybe_logfire() -> Optional[Any]:
    """Return the logfire module if it is importable and configured."""
    try:
        import logfire
    except ImportError:
        return None

    instance = getattr(logfire, "DEFAULT_LOGFIRE_INSTANCE", None)
    try:
        configured = getattr(instance.config, "_initialized", False)
    except Exception:
        # no instance, no config, or a config that fails on access
        return None
    return logfire if configured else None


@contextmanager
def wait_span(timeout: float) -> Iterator[Any]:
    """Open a span covering one wait.

    The yielded object accepts ``set_attribute`` so the caller can record how
    the wait ended.

    Args:
        timeout: Timeout of the wait, in seconds.
    """
    logfire = _maybe_logfire()
    if logfire is None:
        yield _NULL_SPAN
        return

    with logfire.span(SPAN_NAME, timeout=timeout) as active:
        yield active
