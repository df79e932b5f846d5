# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/driver/base.py

from __future__ import annotations

import logging
import posixpath
import threading
import time
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import ClassVar, Dict, List, Optional, TextIO, Tuple

import requests
from pydantic import ValidationError

from airlift.assets.fetcher import AssetFetcher, BinaryStream, Timeout
from airlift.bootstrap.runner import Bootstrapper
from airlift.config.loader import ConfigReconciler
from airlift.config.models import ClusterConfig
from airlift.config.settings import load_settings
from airlift.errors import ConfigError, DriverError
from airlift.images.resolver import ImageResolver, ResolvedImage
from airlift.observers.dispatcher import EventBus
from airlift.observers.events import (
    BinaryFetched,
    BootstrapStarted,
    BootstrapSucceeded,
    ConfigWritten,
    ImageListFetched,
    ImagesResolved,
    OperationFailed,
    new_ctx,
)
from airlift.readiness.catalog import ReadinessCatalog, ReadinessObject
from airlift.utils.execution import ExecutionContext

log = logging.getLogger("airlift")


class Driver(ABC):
    """
    Capability set every distribution implements. The orchestrator
    depends only on this interface.

    Sequence per bootstrap attempt:
      write_config -> binary -> start -> poll system_objects
    image_list / images may run independently of that sequence.
    """

    name: ClassVar[str]

    @property
    @abstractmethod
    def version(self) -> str: ...

    @abstractmethod
    def kube_config_path(self) -> str: ...

    @abstractmethod
    def data_path(self, *elem: str) -> str: ...

    @abstractmethod
    def config_path(self) -> Path: ...

    @abstractmethod
    def write_config(self) -> Path: ...

    @abstractmethod
    def image_list(self, *, timeout: Optional[Timeout] = None) -> List[str]: ...

    @abstractmethod
    def images(
        self,
        *,
        timeout: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Dict[str, ResolvedImage]: ...

    @abstractmethod
    def binary(self, *, timeout: Optional[Timeout] = None) -> BinaryStream: ...

    @abstractmethod
    def system_objects(self) -> Tuple[ReadinessObject, ...]: ...

    @abstractmethod
    def start(
        self,
        out: TextIO,
        *,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> None: ...


class DistributionDriver(Driver):
    """
    Generic driver built from per-distribution class attributes.

    Subclasses set ``name``, ``release_url`` and ``readiness`` and implement
    ``default_config`` and ``install_env``.
    """

    release_url: ClassVar[str]
    readiness: ClassVar[ReadinessCatalog] = ReadinessCatalog()

    def __init__(
        self,
        version: str = "",
        *,
        install_script: str = "",
        bin_dir: Optional[Path] = None,
        execution: Optional[ExecutionContext] = None,
        bus: Optional[EventBus] = None,
        run_id: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        **overrides,
    ):
        settings = load_settings()
        self._version = version
        self.install_script = install_script
        self.bin_dir = Path(bin_dir) if bin_dir else settings.bin_dir
        self.timeout = timeout if timeout is not None else settings.http_timeout
        self.execution = execution or ExecutionContext()
        self.bus = bus
        self.run_id = run_id or str(uuid.uuid4())
        self.config = self._build_config(overrides)

        self._fetcher = AssetFetcher(release_url=self.release_url, name=self.name, session=session)
        self._resolver = ImageResolver(session=session, timeout=self.timeout)

    # ------------------------
    # Distribution hooks
    # ------------------------
    @abstractmethod
    def default_config(self) -> ClusterConfig: ...

    @abstractmethod
    def install_env(self) -> Dict[str, str]: ...

    # ------------------------
    # Internals
    # ------------------------
    def _build_config(self, overrides: dict) -> ClusterConfig:
        data = self.default_config().model_dump()
        data.update(overrides)
        try:
            return ClusterConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"invalid {self.name} config: {e}") from e

    def _emit(self, event_cls, **fields) -> None:
        if self.bus:
            self.bus.emit(event_cls(**fields, **new_ctx(self.name, self._version, self.run_id)))

    @contextmanager
    def _operation(self, operation: str):
        try:
            yield
        except DriverError as e:
            log.error("%s %s: %s failed: %s", self.name, self._version, operation, e)
            self._emit(OperationFailed, operation=operation, error=str(e))
            raise

    # ------------------------
    # Identify / Paths
    # ------------------------
    @property
    def version(self) -> str:
        return self._version

    def kube_config_path(self) -> str:
        return self.config.kube_config

    def data_path(self, *elem: str) -> str:
        return posixpath.join(self.config.data_dir, *elem)

    def config_path(self) -> Path:
        return Path(posixpath.dirname(self.config.kube_config)) / "config.yaml"

    def script_path(self) -> Path:
        return self.bin_dir / f"{self.name}-init.sh"

    # ------------------------
    # ConfigPersist
    # ------------------------
    def write_config(self) -> Path:
        with self._operation("write_config"):
            path = ConfigReconciler(self.config, self.config_path()).persist()
        self._emit(ConfigWritten, path=str(path))
        return path

    # ------------------------
    # ImageEnumerate / BinaryFetch
    # ------------------------
    def _timeout(self, timeout):
        return self.timeout if timeout is None else timeout

    def image_list(self, *, timeout: Optional[Timeout] = None) -> List[str]:
        with self._operation("image_list"):
            imgs = self._fetcher.image_list(self._version, timeout=self._timeout(timeout))
        self._emit(ImageListFetched, url=self._fetcher.image_list_url(self._version), count=len(imgs))
        return imgs

    def images(
        self,
        *,
        timeout: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Dict[str, ResolvedImage]:
        imgs = self.image_list(timeout=timeout)
        with self._operation("images"):
            resolved = self._resolver.resolve(imgs, cancel=cancel, timeout=self._timeout(timeout))
        self._emit(ImagesResolved, images=list(resolved))
        return resolved

    def binary(self, *, timeout: Optional[Timeout] = None) -> BinaryStream:
        with self._operation("binary"):
            stream = self._fetcher.binary(self._version, timeout=self._timeout(timeout))
        self._emit(BinaryFetched, url=stream.url)
        return stream

    # ------------------------
    # ReadinessObjects
    # ------------------------
    def system_objects(self) -> Tuple[ReadinessObject, ...]:
        return self.readiness.objects()

    # ------------------------
    # Bootstrap
    # ------------------------
    def start(
        self,
        out: TextIO,
        *,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> None:
        runner = Bootstrapper(
            script=self.install_script,
            script_path=self.script_path(),
            env_overlay=self.install_env(),
        )
        self._emit(BootstrapStarted, script=str(runner.script_path))
        started = time.time()
        with self._operation("start"):
            runner.run(out, cancel=cancel, timeout=timeout)
        self._emit(
            BootstrapSucceeded,
            script=str(runner.script_path),
            duration_ms=int((time.time() - started) * 1000),
        )
