import pytest

from airlift.images.reference import InvalidReferenceError, parse_reference

DIGEST = "sha256:" + "a" * 64


@pytest.mark.parametrize("raw,registry,repository,tag,digest", [
    ("nginx", "docker.io", "library/nginx", "latest", None),
    ("nginx:1.25", "docker.io", "library/nginx", "1.25", None),
    ("rancher/klipper-helm:v0.8.0", "docker.io", "rancher/klipper-helm", "v0.8.0", None),
    ("docker.io/rancher/mirrored-pause:3.6", "docker.io", "rancher/mirrored-pause", "3.6", None),
    ("quay.io/coreos/etcd", "quay.io", "coreos/etcd", "latest", None),
    ("localhost:5000/team/app:dev", "localhost:5000", "team/app", "dev", None),
    ("localhost/app", "localhost", "app", "latest", None),
    (f"ghcr.io/org/app@{DIGEST}", "ghcr.io", "org/app", None, DIGEST),
    (f"ghcr.io/org/app:1.0@{DIGEST}", "ghcr.io", "org/app", "1.0", DIGEST),
])
def test_parse_reference(raw, registry, repository, tag, digest):
    ref = parse_reference(raw)
    assert ref.registry == registry
    assert ref.repository == repository
    assert ref.tag == tag
    assert ref.digest == digest


def test_identifier_prefers_digest():
    ref = parse_reference(f"ghcr.io/org/app:1.0@{DIGEST}")
    assert ref.identifier == DIGEST


def test_docker_hub_api_host():
    assert parse_reference("nginx").api_host == "registry-1.docker.io"
    assert parse_reference("quay.io/a/b").api_host == "quay.io"


def test_str_is_fully_qualified():
    assert str(parse_reference("nginx")) == "docker.io/library/nginx:latest"


@pytest.mark.parametrize("raw", ["", "   ", "UPPER/case", "app@sha256:short", "app:bad tag", "a//b"])
def test_invalid_references(raw):
    with pytest.raises(InvalidReferenceError):
        parse_reference(raw)
