import pytest
from pydantic import ValidationError

from airlift.config.models import ClusterConfig


def test_aliases_and_field_names_both_accepted():
    by_alias = ClusterConfig.model_validate({
        "data-dir": "/var/lib/x",
        "write-kubeconfig": "/etc/x/x.yaml",
        "write-kubeconfig-mode": "0600",
    })
    by_name = ClusterConfig(data_dir="/var/lib/x", kube_config="/etc/x/x.yaml", kube_config_mode="0600")
    assert by_alias == by_name


def test_relative_path_rejected():
    with pytest.raises(ValidationError):
        ClusterConfig(data_dir="var/lib/x", kube_config="/etc/x/x.yaml", kube_config_mode="0644")


@pytest.mark.parametrize("mode", ["0644", "644", "0755", "600"])
def test_valid_modes(mode):
    cfg = ClusterConfig(data_dir="/d", kube_config="/k/k.yaml", kube_config_mode=mode)
    assert cfg.kube_config_mode == mode


@pytest.mark.parametrize("mode", ["0648", "rw-r--r--", "", "12"])
def test_invalid_modes(mode):
    with pytest.raises(ValidationError):
        ClusterConfig(data_dir="/d", kube_config="/k/k.yaml", kube_config_mode=mode)


def test_to_mapping_omits_empty_and_keeps_duplicates():
    cfg = ClusterConfig(
        data_dir="/d", kube_config="/k/k.yaml", kube_config_mode="0644",
        disable=["traefik", "traefik"],
    )
    assert cfg.to_mapping() == {
        "data-dir": "/d",
        "write-kubeconfig": "/k/k.yaml",
        "write-kubeconfig-mode": "0644",
        "disable": ["traefik", "traefik"],
    }
    empty = ClusterConfig(data_dir="/d", kube_config="/k/k.yaml", kube_config_mode="0644")
    assert "disable" not in empty.to_mapping()


def test_unknown_field_rejected():
    with pytest.raises(ValidationError):
        ClusterConfig(data_dir="/d", kube_config="/k/k.yaml", kube_config_mode="0644", token="x")
