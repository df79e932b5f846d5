# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/config/models.py

from __future__ import annotations

import posixpath
import re
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

_MODE_RE = re.compile(r"^[0-7]{3,4}$")


class ClusterConfig(BaseModel):
    """
    Distribution server config as written to ``config.yaml``.

    Field aliases are the on-disk keys. Order of ``disable`` is kept
    and duplicates are not collapsed.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    data_dir: str = Field(alias="data-dir")
    kube_config: str = Field(alias="write-kubeconfig")
    kube_config_mode: str = Field(alias="write-kubeconfig-mode")
    disable: List[str] = Field(default_factory=list)

    @field_validator("data_dir", "kube_config")
    @classmethod
    def _absolute(cls, v: str) -> str:
        if not posixpath.isabs(v):
            raise ValueError(f"path must be absolute: {v!r}")
        return v

    @field_validator("kube_config_mode")
    @classmethod
    def _octal_mode(cls, v: str) -> str:
        if not _MODE_RE.match(v):
            raise ValueError(f"not an octal file mode: {v!r}")
        return v

    def to_mapping(self) -> Dict[str, Any]:
        """Generic mapping keyed by alias, with empty values left out."""
        data = self.model_dump(by_alias=True)
        return {k: v for k, v in data.items() if v not in (None, "", [], {})}
