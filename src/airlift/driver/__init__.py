# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/driver/__init__.py

from .base import Driver, DistributionDriver
from .registry import available_drivers, get_driver, register_driver
from .k3s import K3sDriver

__all__ = [
    "Driver",
    "DistributionDriver",
    "K3sDriver",
    "available_drivers",
    "get_driver",
    "register_driver",
]
