"""Attempt-and-log helper for side work that must never abort the primary operation."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


@contextmanager
def best_effort(action: str) -> Iterator[None]:
    """Run the block, logging and swallowing any ``Exception`` it raises.

    Used for the shell-profile scrape and for deleting uploaded files, where a
    failure is worth a warning but must not replace the caller's result or error.
    """
    try:
        yield
    except Exception:
        logger.warning("Best-effort %s failed", action, exc_info=True)
