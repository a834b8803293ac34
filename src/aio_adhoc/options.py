"""Configuration options for aio_adhoc."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEBUG_ENV = "AIO_ADHOC_DEBUG"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class AdHocOptions:
    """Options for configuring run_with_timeout.

    Attributes:
        debug: Run the owned event loop in asyncio debug mode. When unset, the
            AIO_ADHOC_DEBUG environment variable decides.
        default_timeout: Timeout in seconds used when run_with_timeout is called
            without one.
    """

    # Run the owned event loop in asyncio debug mode
    debug: Optional[bool] = None

    # Timeout used when the call site does not pass one
    default_timeout: Optional[float] = None

    def resolve_debug(self, env: Optional[Mapping[str, str]] = None) -> bool:
        """Return the effective debug flag.

        Args:
            env: Environment to read instead of os.environ.

        Returns:
            The explicit ``debug`` value, or the environment setting when unset.
        """
        if self.debug is not None:
            return self.debug
        source = os.environ if env is None else env
        return source.get(DEBUG_ENV, "").strip().lower() in _TRUTHY
