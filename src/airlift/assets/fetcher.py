# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/assets/fetcher.py

from __future__ import annotations

import logging
import os
from typing import BinaryIO, Iterator, List, Optional, Tuple, Union

import requests

from airlift.errors import FetchError, ParseError

log = logging.getLogger("airlift")

Timeout = Union[float, Tuple[float, float]]

DEFAULT_TIMEOUT: Timeout = 30


class BinaryStream:
    """
    Caller-owned body of a release download.

    Use as a context manager, or call ``close()`` once the body has been
    consumed.
    """

    def __init__(self, response: requests.Response, *, url: str, version: str = ""):
        self._response = response
        self.url = url
        self.version = version

    @property
    def content_length(self) -> Optional[int]:
        value = self._response.headers.get("Content-Length")
        return int(value) if value and value.isdigit() else None

    def iter_chunks(self, chunk_size: int = 1024 * 1024) -> Iterator[bytes]:
        try:
            for chunk in self._response.iter_content(chunk_size=chunk_size):
                if chunk:
                    yield chunk
        except requests.RequestException as e:
            raise FetchError(
                f"download of {self.version} from {self.url} interrupted: {e}",
                version=self.version,
                url=self.url,
            ) from e

    def read(self) -> bytes:
        return b"".join(self.iter_chunks())

    def copy_to(self, fileobj: BinaryIO, chunk_size: int = 1024 * 1024) -> int:
        written = 0
        for chunk in self.iter_chunks(chunk_size):
            fileobj.write(chunk)
            written += len(chunk)
        return written

    def close(self) -> None:
        self._response.close()

    def __enter__(self) -> "BinaryStream":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class AssetFetcher:
    """
    Retrieves release assets laid out as ``{release_url}/{version}/{name}``.
    No retries here; ``FetchError`` is left to the caller's policy.
    """

    def __init__(
        self,
        *,
        release_url: str,
        name: str,
        session: Optional[requests.Session] = None,
    ):
        self.release_url = release_url.rstrip("/")
        self.name = name
        self._session = session or requests.Session()

    # -----------------------
    # URLs
    # -----------------------
    def binary_url(self, version: str) -> str:
        return f"{self.release_url}/{version}/{self.name}"

    def image_list_url(self, version: str) -> str:
        return f"{self.release_url}/{version}/{self.name}-images.txt"

    # -----------------------
    # HTTP helpers
    # -----------------------
    def _get(self, url: str, *, version: str, what: str, stream: bool, timeout: Timeout) -> requests.Response:
        if not version:
            raise FetchError(f"no {self.name} version set, cannot fetch {what}", version=version, url=url)

        log.debug("GET %s", url)
        try:
            resp = self._session.get(url, stream=stream, timeout=timeout)
        except requests.RequestException as e:
            raise FetchError(
                f"failed to return {what} for {self.name} {version} from {url}: {e}",
                version=version,
                url=url,
            ) from e

        if resp.status_code != 200:
            resp.close()
            raise FetchError(
                f"failed to return {what} for {self.name} {version} from {url}: HTTP {resp.status_code}",
                version=version,
                url=url,
            )
        return resp

    # -----------------------
    # Assets
    # -----------------------
    def binary(self, version: str, *, timeout: Timeout = DEFAULT_TIMEOUT) -> BinaryStream:
        url = self.binary_url(version)
        resp = self._get(url, version=version, what="executable", stream=True, timeout=timeout)
        return BinaryStream(resp, url=url, version=version)

    def image_list(self, version: str, *, timeout: Timeout = DEFAULT_TIMEOUT) -> List[str]:
        """
        Image references from the release image list, in file order.
        Blank lines are skipped; duplicates are kept.
        """
        url = self.image_list_url(version)
        resp = self._get(url, version=version, what="images", stream=False, timeout=timeout)
        try:
            try:
                text = resp.content.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(f"image list is not valid UTF-8: {e}", source=url) from e
            except requests.RequestException as e:
                raise FetchError(
                    f"failed to read images for {self.name} {version} from {url}: {e}",
                    version=version,
                    url=url,
                ) from e
        finally:
            resp.close()

        images = [line.strip() for line in text.splitlines() if line.strip()]
        log.debug("Image list %s: %d reference(s)", url, len(images))
        return images


def save_stream(stream: BinaryStream, dest, mode: int = 0o755) -> int:
    """Write a binary stream to *dest* and close it. Returns bytes written."""
    with stream, open(dest, "wb") as f:
        written = stream.copy_to(f)
    os.chmod(dest, mode)
    return written
