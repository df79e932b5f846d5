# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/utils/retry.py

from __future__ import annotations

import functools
import logging
import time
from typing import Callable, Optional

from airlift.errors import FetchError

log = logging.getLogger("airlift")


class RetryError(FetchError):
    """Raised once every attempt at a release fetch has failed."""

    def __init__(self, name: str, attempts: int, last: FetchError):
        super().__init__(
            f"{name} failed after {attempts} attempt(s): {last}",
            version=last.version,
            url=last.url,
        )
        self.attempts = attempts
        self.last = last


def retry_fetch(
    *,
    attempts: int,
    delay: float,
    on_retry: Optional[Callable[[int, FetchError], None]] = None,
):
    """
    Caller-side retry for release downloads and image resolution.

    Drivers never retry on their own; only ``FetchError`` is retried here.
    Config, parse and exec failures propagate on the first attempt.
    """
    attempts = max(attempts, 1)

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            for attempt in range(1, attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except FetchError as exc:
                    log.warning("fetch attempt %d/%d failed: %s", attempt, attempts, exc)
                    if on_retry:
                        on_retry(attempt, exc)
                    if attempt == attempts:
                        raise RetryError(getattr(fn, "__name__", "fetch"), attempts, exc) from exc
                    time.sleep(delay)
        return wrapper
    return decorator
