import pytest
import requests

from airlift.assets.fetcher import AssetFetcher, save_stream
from airlift.errors import FetchError, ParseError

BASE = "https://releases.example.test/download"


def _fetcher():
    return AssetFetcher(release_url=BASE + "/", name="k3s")


def test_urls_follow_release_layout():
    f = _fetcher()
    assert f.binary_url("v1.27.4+k3s1") == f"{BASE}/v1.27.4+k3s1/k3s"
    assert f.image_list_url("v1.27.4+k3s1") == f"{BASE}/v1.27.4+k3s1/k3s-images.txt"


def test_binary_returns_full_body(requests_mock):
    payload = b"\x7fELF" + bytes(range(256)) * 64
    requests_mock.get(f"{BASE}/v1.0.0/k3s", status_code=200, content=payload)

    with _fetcher().binary("v1.0.0") as stream:
        assert stream.read() == payload


def test_binary_copy_to_file(requests_mock, tmp_path):
    requests_mock.get(f"{BASE}/v1.0.0/k3s", status_code=200, content=b"binary-bytes")

    dest = tmp_path / "k3s"
    written = save_stream(_fetcher().binary("v1.0.0"), dest)

    assert written == len(b"binary-bytes")
    assert dest.read_bytes() == b"binary-bytes"
    assert dest.stat().st_mode & 0o111


@pytest.mark.parametrize("status_code", [404, 500, 302])
def test_binary_non_success_raises_with_version_and_url(requests_mock, status_code):
    url = f"{BASE}/v9.9.9/k3s"
    requests_mock.get(url, status_code=status_code, text="nope")

    with pytest.raises(FetchError) as e:
        _fetcher().binary("v9.9.9")

    assert e.value.version == "v9.9.9"
    assert e.value.url == url
    assert "v9.9.9" in str(e.value)
    assert url in str(e.value)


def test_binary_transport_error_raises_fetch_error(requests_mock):
    url = f"{BASE}/v1.0.0/k3s"
    requests_mock.get(url, exc=requests.exceptions.ConnectTimeout)

    with pytest.raises(FetchError) as e:
        _fetcher().binary("v1.0.0")
    assert e.value.url == url


def test_missing_version_fails_before_request(requests_mock):
    with pytest.raises(FetchError):
        _fetcher().binary("")
    assert requests_mock.call_count == 0


def test_image_list_skips_blank_lines_and_keeps_order(requests_mock):
    body = (
        "docker.io/rancher/klipper-helm:v0.8.0\n"
        "\n"
        "docker.io/rancher/mirrored-coredns-coredns:1.10.1\n"
        "   \n"
        "docker.io/rancher/local-path-provisioner:v0.0.24\n"
        "docker.io/rancher/klipper-helm:v0.8.0\n"
        "\n"
    )
    requests_mock.get(f"{BASE}/v1.0.0/k3s-images.txt", status_code=200, text=body)

    imgs = _fetcher().image_list("v1.0.0")

    assert imgs == [
        "docker.io/rancher/klipper-helm:v0.8.0",
        "docker.io/rancher/mirrored-coredns-coredns:1.10.1",
        "docker.io/rancher/local-path-provisioner:v0.0.24",
        "docker.io/rancher/klipper-helm:v0.8.0",
    ]
    assert all(imgs)


def test_image_list_handles_crlf(requests_mock):
    requests_mock.get(f"{BASE}/v1.0.0/k3s-images.txt", status_code=200, text="a:1\r\n\r\nb:2\r\n")
    assert _fetcher().image_list("v1.0.0") == ["a:1", "b:2"]


def test_image_list_non_success_raises(requests_mock):
    url = f"{BASE}/v1.0.0/k3s-images.txt"
    requests_mock.get(url, status_code=403)

    with pytest.raises(FetchError) as e:
        _fetcher().image_list("v1.0.0")
    assert e.value.url == url
    assert e.value.version == "v1.0.0"


def test_image_list_binary_garbage_is_parse_error(requests_mock):
    requests_mock.get(f"{BASE}/v1.0.0/k3s-images.txt", status_code=200, content=b"\xff\xfe\x00bad")

    with pytest.raises(ParseError):
        _fetcher().image_list("v1.0.0")


class _BrokenBody:
    """Response whose body drops after the first chunk."""

    def __init__(self):
        self.closed = False

    def iter_content(self, chunk_size=None):
        yield b"partial"
        raise requests.exceptions.ChunkedEncodingError("connection broken")

    def close(self):
        self.closed = True


def test_interrupted_download_is_fetch_error():
    from airlift.assets.fetcher import BinaryStream

    url = f"{BASE}/v1.0.0/k3s"
    body = _BrokenBody()

    with pytest.raises(FetchError) as e:
        with BinaryStream(body, url=url, version="v1.0.0") as stream:
            stream.read()

    assert e.value.url == url
    assert e.value.version == "v1.0.0"
    assert body.closed


def test_binary_stream_carries_version(requests_mock):
    requests_mock.get(f"{BASE}/v1.0.0/k3s", content=b"x")
    with _fetcher().binary("v1.0.0") as stream:
        assert stream.version == "v1.0.0"
