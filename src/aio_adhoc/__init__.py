"""
aio_adhoc

Run callback-driven asyncio code as if it were one blocking call: set up the
work, wait for a send, a failure or a timeout, and get the result back.
"""

from .callbacks import Callback, begin, end_callback, fail_callback, send_callback
from .exceptions import (
    AdHocError,
    ExplicitFailureError,
    InvalidTimeoutError,
    NestedRecvError,
    NoActiveScopeError,
    RecvTimeoutError,
)
from .goals import goal, goal_results, pending_goals
from .options import AdHocOptions
from .runner import last_values, run_with_timeout, run_with_timeout_async

__version__ = "0.1.0"

__all__ = [
    "run_with_timeout",
    "run_with_timeout_async",
    "last_values",
    "send_callback",
    "fail_callback",
    "end_callback",
    "begin",
    "goal",
    "pending_goals",
    "goal_results",
    "Callback",
    "AdHocOptions",
    "AdHocError",
    "InvalidTimeoutError",
    "NestedRecvError",
    "NoActiveScopeError",
    "RecvTimeoutError",
    "ExplicitFailureError",
]
