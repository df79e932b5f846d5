# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/readiness/catalog.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple


@dataclass(frozen=True)
class ReadinessObject:
    """A workload the orchestrator waits on before treating the cluster as usable."""

    namespace: str
    name: str
    kind: str
    group: str

    def __str__(self) -> str:
        return f"{self.namespace}_{self.name}_{self.group}_{self.kind}"


class ReadinessCatalog:
    """Fixed, ordered set of readiness objects for one distribution."""

    def __init__(self, objects: Iterable[ReadinessObject] = ()):
        self._objects: Tuple[ReadinessObject, ...] = tuple(objects)

    @classmethod
    def deployments(cls, namespace: str, *names: str) -> "ReadinessCatalog":
        return cls(
            ReadinessObject(namespace=namespace, name=n, kind="Deployment", group="apps")
            for n in names
        )

    def objects(self) -> Tuple[ReadinessObject, ...]:
        return self._objects

    def __iter__(self):
        return iter(self._objects)

    def __len__(self) -> int:
        return len(self._objects)
