import pytest

from airlift.errors import ConfigError, FetchError
from airlift.utils.retry import RetryError, retry_fetch


def test_retries_fetch_errors_until_success():
    calls = []

    @retry_fetch(attempts=3, delay=0)
    def fetch():
        calls.append(1)
        if len(calls) < 3:
            raise FetchError("503", version="v1", url="https://x/v1/k3s")
        return "ok"

    assert fetch() == "ok"
    assert len(calls) == 3


def test_exhausted_retries_keep_version_and_url():
    seen = []

    @retry_fetch(attempts=2, delay=0, on_retry=lambda n, e: seen.append(n))
    def fetch():
        raise FetchError("503", version="v1", url="https://x/v1/k3s")

    with pytest.raises(RetryError) as e:
        fetch()

    assert isinstance(e.value, FetchError)
    assert e.value.version == "v1"
    assert e.value.url == "https://x/v1/k3s"
    assert e.value.attempts == 2
    assert seen == [1, 2]


def test_non_fetch_errors_are_not_retried():
    calls = []

    @retry_fetch(attempts=5, delay=0)
    def write():
        calls.append(1)
        raise ConfigError("bad dir")

    with pytest.raises(ConfigError):
        write()
    assert len(calls) == 1
