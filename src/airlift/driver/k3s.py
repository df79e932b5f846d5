# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/driver/k3s.py

from __future__ import annotations

from typing import Dict

from airlift.config.models import ClusterConfig
from airlift.driver.base import DistributionDriver
from airlift.driver.registry import register_driver
from airlift.readiness.catalog import ReadinessCatalog

K3S_RELEASE_URL = "https://github.com/k3s-io/k3s/releases/download"


@register_driver("k3s")
class K3sDriver(DistributionDriver):
    name = "k3s"
    release_url = K3S_RELEASE_URL

    # bootstrap waits on these before installing anything else
    readiness = ReadinessCatalog.deployments("kube-system", "coredns")

    def default_config(self) -> ClusterConfig:
        return ClusterConfig(
            data_dir="/var/lib/rancher/k3s",
            kube_config="/etc/rancher/k3s/k3s.yaml",
            kube_config_mode="0644",
            disable=[],
        )

    def install_env(self) -> Dict[str, str]:
        env = {
            "INSTALL_K3S_SKIP_DOWNLOAD": "true",
            "INSTALL_K3S_SELINUX_WARN": "true",
            "INSTALL_K3S_SKIP_SELINUX_RPM": "true",
            "INSTALL_K3S_BIN_DIR": str(self.bin_dir),
        }
        if self.execution.dry_run:
            env["INSTALL_K3S_SKIP_START"] = "true"
        return env
