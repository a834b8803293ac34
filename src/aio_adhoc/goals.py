"""Named goals that are collected into one result mapping."""

from __future__ import annotations

from functools import partial
from typing import Any, Dict, List, Tuple

from .callbacks import Callback
from .scope import WaitScope, latest_scope, require_active


def _complete(name: str, scope: WaitScope, values: Tuple[Any, ...]) -> None:
    """Record the result of goal ``name`` on ``scope``."""
    scope.complete_goal(name, values)


def goal(name: str, *fixed: Any) -> Callback:
    """Register a named goal and return the callback that completes it.

    The wait ends successfully once every registered goal has completed, and
    run_with_timeout then returns the mapping of goal names to argument lists.
    Registering a name twice while pending does not duplicate it, and a
    completed name is not re-armed.

    Args:
        name: Goal name, used as the key in the result mapping.
        *fixed: Values stored ahead of the callback's own arguments.

    Raises:
        NoActiveScopeError: If called outside run_with_timeout.
    """
    scope = require_active("goal")
    scope.register_goal(name)
    return Callback(f"goal {name!r}", scope, partial(_complete, name), fixed)


def pending_goals() -> Dict[str, bool]:
    """Return goals of the latest wait that have not completed.

    Still meaningful after a timeout, to tell which goals never finished.
    """
    scope = latest_scope()
    if scope is None:
        return {}
    return dict(scope.pending)


def goal_results() -> Dict[str, List[Any]]:
    """Return the argument lists recorded by completed goals of the latest wait."""
    scope = latest_scope()
    if scope is None:
        return {}
    return {name: list(values) for name, values in scope.results.items()}
