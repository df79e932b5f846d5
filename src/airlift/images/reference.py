# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/images/reference.py

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

DEFAULT_REGISTRY = "docker.io"
DEFAULT_TAG = "latest"

_REPO_COMPONENT = re.compile(r"^[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*$")
_TAG = re.compile(r"^[\w][\w.-]{0,127}$")
_DIGEST = re.compile(r"^[a-z0-9]+(?:[.+_-][a-z0-9]+)*:[a-zA-Z0-9=_-]{32,}$")


class InvalidReferenceError(ValueError):
    pass


@dataclass(frozen=True)
class ImageReference:
    """
    Parsed image reference, normalized the way Docker does:
      - no registry      -> docker.io
      - ``nginx``        -> ``library/nginx`` on docker.io
      - no tag or digest -> ``latest``
    """

    registry: str
    repository: str
    tag: Optional[str] = None
    digest: Optional[str] = None

    @property
    def identifier(self) -> str:
        """Tag or digest as used in the manifests URL."""
        return self.digest or self.tag or DEFAULT_TAG

    @property
    def api_host(self) -> str:
        if self.registry == DEFAULT_REGISTRY:
            return "registry-1.docker.io"
        return self.registry

    def __str__(self) -> str:
        s = f"{self.registry}/{self.repository}"
        if self.tag:
            s += f":{self.tag}"
        if self.digest:
            s += f"@{self.digest}"
        return s


def _looks_like_registry(component: str) -> bool:
    return "." in component or ":" in component or component == "localhost"


def parse_reference(raw: str) -> ImageReference:
    ref = raw.strip()
    if not ref:
        raise InvalidReferenceError("empty image reference")

    digest = None
    if "@" in ref:
        ref, digest = ref.split("@", 1)
        if not _DIGEST.match(digest):
            raise InvalidReferenceError(f"invalid digest in {raw!r}")

    tag = None
    last = ref.rsplit("/", 1)[-1]
    if ":" in last:
        ref, tag = ref.rsplit(":", 1)
        if not _TAG.match(tag):
            raise InvalidReferenceError(f"invalid tag in {raw!r}")

    parts = ref.split("/")
    if len(parts) > 1 and _looks_like_registry(parts[0]):
        registry, parts = parts[0], parts[1:]
    else:
        registry = DEFAULT_REGISTRY

    if registry == DEFAULT_REGISTRY and len(parts) == 1:
        parts = ["library"] + parts

    for p in parts:
        if not _REPO_COMPONENT.match(p):
            raise InvalidReferenceError(f"invalid repository component {p!r} in {raw!r}")

    if tag is None and digest is None:
        tag = DEFAULT_TAG

    return ImageReference(
        registry=registry,
        repository="/".join(parts),
        tag=tag,
        digest=digest,
    )
