# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/config/settings.py


from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os

@dataclass(frozen=True)
class Settings:
    bin_dir: Path
    http_timeout: float
    log_dir: Optional[Path] = None

def load_settings() -> Settings:
    # defaults match a stock install; override via env
    log_dir = os.getenv("AIRLIFT_LOG_DIR")
    return Settings(
        bin_dir=Path(os.getenv("AIRLIFT_BIN_DIR", "/opt/airlift/bin")),
        http_timeout=float(os.getenv("AIRLIFT_HTTP_TIMEOUT", "30")),
        log_dir=Path(log_dir) if log_dir else None,
    )
