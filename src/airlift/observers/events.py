# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events of one bootstrap attempt
    driver: str       # distribution name, e.g. k3s
    version: str      # distribution version

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(driver: str, version: str, run_id: str | None = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": run_id or str(uuid.uuid4()),
        "driver": driver,
        "version": version,
    }


# ---------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ConfigWritten(BaseEvent):
    path: str


# ---------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BinaryFetched(BaseEvent):
    url: str

@dataclass(frozen=True)
class ImageListFetched(BaseEvent):
    url: str
    count: int

@dataclass(frozen=True)
class ImagesResolved(BaseEvent):
    images: List[str]


# ---------------------------------------------------------------------
# Bootstrap
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BootstrapStarted(BaseEvent):
    script: str

@dataclass(frozen=True)
class BootstrapSucceeded(BaseEvent):
    script: str
    duration_ms: int


# ---------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class OperationFailed(BaseEvent):
    operation: str
    error: str
