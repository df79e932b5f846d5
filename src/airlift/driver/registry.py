# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/driver/registry.py

from __future__ import annotations

from typing import Dict, List, Type

from airlift.driver.base import Driver
from airlift.errors import UnknownDriverError

_DRIVERS: Dict[str, Type[Driver]] = {}


def register_driver(name: str):
    """Class decorator adding a driver to the registry under *name*."""

    def decorator(cls: Type[Driver]) -> Type[Driver]:
        existing = _DRIVERS.get(name)
        if existing is not None and existing is not cls:
            raise ValueError(f"driver {name!r} already registered by {existing.__name__}")
        _DRIVERS[name] = cls
        return cls

    return decorator


def available_drivers() -> List[str]:
    return sorted(_DRIVERS)


def get_driver(name: str, **kwargs) -> Driver:
    """Factory: build the driver registered for distribution *name*."""
    try:
        cls = _DRIVERS[name]
    except KeyError:
        raise UnknownDriverError(
            f"Unsupported distribution: {name} (supported: {', '.join(available_drivers())})"
        ) from None
    return cls(**kwargs)
