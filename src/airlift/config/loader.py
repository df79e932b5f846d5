# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/config/loader.py

from __future__ import annotations

import copy
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

import yaml

from airlift.config.models import ClusterConfig
from airlift.errors import ConfigError, ParseError

log = logging.getLogger("airlift")

CONFIG_FILE_MODE = 0o644


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Any key present in override wins; nested mappings merge per key.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def _load_user_config(path: Path) -> Dict[str, Any]:
    """Load a hand-edited config file; a missing file is an empty mapping."""
    try:
        raw = path.read_text()
    except FileNotFoundError:
        return {}
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ParseError(f"invalid YAML: {e}", source=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParseError(
            f"expected a mapping at top level, got {type(data).__name__}",
            source=str(path),
        )
    return data


def _atomic_write(path: Path, data: str, mode: int) -> None:
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        raise


class ConfigReconciler:
    """
    Merges distribution defaults with the user's ``config.yaml`` and
    persists the result next to the kubeconfig.

    Precedence: keys present in the on-disk file win; defaults only fill
    keys the user left out. Output keys are sorted so repeated runs
    produce identical bytes. Callers must serialize concurrent runs
    against the same directory.
    """

    def __init__(self, config: ClusterConfig, path: Path):
        self.config = config
        self.path = Path(path)

    def merged(self) -> Dict[str, Any]:
        defaults = self.config.to_mapping()
        user = _load_user_config(self.path)
        if user:
            log.debug("Merging user config from %s (keys=%s)", self.path, sorted(user))
        else:
            log.debug("No user config at %s, writing defaults", self.path)
        return _deep_merge(defaults, user)

    def render(self) -> str:
        merged = self.merged()
        try:
            return yaml.safe_dump(merged, sort_keys=True, default_flow_style=False)
        except yaml.YAMLError as e:
            raise ConfigError(f"cannot serialize config for {self.path}: {e}") from e

    def persist(self) -> Path:
        parent = self.path.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"cannot create config directory {parent}: {e}") from e

        data = self.render()
        try:
            _atomic_write(self.path, data, CONFIG_FILE_MODE)
        except OSError as e:
            raise ConfigError(f"cannot write config {self.path}: {e}") from e

        log.info("Wrote config %s", self.path)
        return self.path
