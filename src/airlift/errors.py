# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/errors.py
from __future__ import annotations

from typing import Dict, Optional


class DriverError(RuntimeError):
    """Base class for distribution driver failures."""


class ConfigError(DriverError):
    """Raised when the cluster config cannot be built, merged or written."""


class ParseError(DriverError):
    """Raised when an on-disk config or a remote image list is malformed."""

    def __init__(self, message: str, *, source: str):
        super().__init__(f"{message} ({source})")
        self.source = source


class FetchError(DriverError):
    """Raised on transport failure or a non-success response for a release asset."""

    def __init__(self, message: str, *, version: str = "", url: str = ""):
        super().__init__(message)
        self.version = version
        self.url = url


class ResolveError(FetchError):
    """
    Raised when one or more image references cannot be resolved.

    ``failures`` maps every failing reference to the reason it failed.
    """

    def __init__(self, failures: Dict[str, str]):
        self.failures = dict(failures)
        lines = "\n".join(f"  {ref}: {reason}" for ref, reason in self.failures.items())
        super().__init__(f"failed to resolve {len(self.failures)} image(s):\n{lines}")


class ExecError(DriverError):
    """Raised when the install script cannot be launched or exits non-zero."""

    def __init__(self, message: str, *, script: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.script = script
        self.returncode = returncode


class UnknownDriverError(ValueError):
    pass
