# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/observers/dispatcher.py
from __future__ import annotations
import logging
from typing import List, Optional, Protocol
from .events import BaseEvent

log = logging.getLogger("airlift")


class Observer(Protocol):
    """Anything that wants driver lifecycle events (logs, progress UIs, audit files)."""

    def notify(self, event: BaseEvent) -> None: ...


class EventBus:
    """Fans driver events out to observers; a failing observer never fails the driver."""

    def __init__(self, observers: Optional[List[Observer]] = None):
        self._observers: List[Observer] = list(observers or [])

    def subscribe(self, observer: Observer) -> None:
        self._observers.append(observer)

    def emit(self, event: BaseEvent) -> None:
        for ob in self._observers:
            try:
                ob.notify(event)
            except Exception:
                log.debug("observer %r failed on %s", ob, type(event).__name__, exc_info=True)
