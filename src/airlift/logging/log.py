# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

#src/airlift/logging/log.py

from __future__ import annotations

import logging
from pathlib import Path
from datetime import datetime, timezone
import uuid

from airlift.config.settings import load_settings

LOGGER_NAME = "airlift"

# transport chatter from requests stays out of the console
_QUIET_LOGGERS = ("urllib3", "requests")


def init_logging(
    *,
    distribution: str,
    version: str = "",
    base_dir: Path | None = None,
    verbose: bool = False,
) -> tuple[logging.Logger, str, Path]:
    """
    One log file per driver run, named after the distribution.

    File gets the full DEBUG trace (HTTP requests, merge keys, installer
    command line); the console gets INFO, or DEBUG with --verbose.
    Returns the run_id so driver events can be correlated with the file.
    """
    run_id = str(uuid.uuid4())

    if base_dir is None:
        base_dir = load_settings().log_dir or Path.home() / ".airlift" / "logs"
    base_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_path = base_dir / f"{distribution}-{ts}-{run_id}.log"

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for h in list(logger.handlers):
        h.close()
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    fh = logging.FileHandler(log_path)
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(formatter)

    logger.addHandler(fh)
    logger.addHandler(ch)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    logger.debug("=== %s %s run %s ===", distribution, version or "(no version)", run_id)
    logger.debug("log_file=%s", log_path)

    return logger, run_id, log_path
