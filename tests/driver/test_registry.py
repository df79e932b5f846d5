import pytest

from airlift.config.models import ClusterConfig
from airlift.driver import DistributionDriver, available_drivers, get_driver, register_driver
from airlift.driver.registry import _DRIVERS
from airlift.errors import UnknownDriverError
from airlift.readiness.catalog import ReadinessCatalog


@pytest.fixture
def clean_registry():
    saved = dict(_DRIVERS)
    yield
    _DRIVERS.clear()
    _DRIVERS.update(saved)


def test_k3s_registered_by_default():
    assert "k3s" in available_drivers()


def test_unknown_distribution_names_supported_set():
    with pytest.raises(UnknownDriverError) as e:
        get_driver("microk8s")
    assert "microk8s" in str(e.value)
    assert "k3s" in str(e.value)


def test_new_distribution_plugs_in_without_other_changes(clean_registry):
    @register_driver("tiny")
    class TinyDriver(DistributionDriver):
        name = "tiny"
        release_url = "https://releases.example.test"
        readiness = ReadinessCatalog.deployments("tiny-system", "dns", "proxy")

        def default_config(self):
            return ClusterConfig(data_dir="/var/lib/tiny", kube_config="/etc/tiny/kube.yaml", kube_config_mode="0600")

        def install_env(self):
            return {"TINY_SKIP_DOWNLOAD": "1"}

    drv = get_driver("tiny", version="v0.1.0")

    assert isinstance(drv, TinyDriver)
    assert "tiny" in available_drivers()
    assert [o.name for o in drv.system_objects()] == ["dns", "proxy"]
    assert drv._fetcher.binary_url("v0.1.0") == "https://releases.example.test/v0.1.0/tiny"


def test_conflicting_registration_rejected(clean_registry):
    class Other(DistributionDriver):
        name = "k3s"

    with pytest.raises(ValueError):
        register_driver("k3s")(Other)
