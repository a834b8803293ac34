"""Custom exceptions surfaced by aio_adhoc."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class AdHocError(Exception):
    """Base exception for aio_adhoc errors."""


class InvalidTimeoutError(AdHocError, ValueError):
    """Raised when run_with_timeout receives a zero, missing or non-numeric timeout."""

    def __init__(self, timeout: Any) -> None:
        """Build the error for the rejected ``timeout`` value."""
        super().__init__(
            f"Timeout must be a nonzero number of seconds "
            f"(negative waits forever), got {timeout!r}"
        )
        self.timeout = timeout


class NestedRecvError(AdHocError):
    """Raised when run_with_timeout is entered while another call is still waiting."""

    def __init__(self) -> None:
        """Build the error with a fixed message."""
        super().__init__("Nested calls to run_with_timeout are not allowed")


class NoActiveScopeError(AdHocError):
    """Raised when a callback factory is used outside run_with_timeout."""

    def __init__(self, operation: str) -> None:
        """Build the error for the misused ``operation``."""
        super().__init__(f"{operation} called outside run_with_timeout")
        self.operation = operation


@dataclass
class RecvTimeoutError(AdHocError, TimeoutError):
    """Raised when the timer fires before anything resolved the wait."""

    timeout: float

    def __post_init__(self) -> None:
        """Set the message from ``timeout``."""
        super().__init__(f"Timeout after {self.timeout} seconds")


class ExplicitFailureError(AdHocError):
    """Raised when a failure callback fires with a reason that is not an exception."""

    def __init__(self, reason: Any) -> None:
        """Keep ``reason`` and use its text as the message."""
        super().__init__(str(reason))
        self.reason = reason
