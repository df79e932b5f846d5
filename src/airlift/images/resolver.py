# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/images/resolver.py

from __future__ import annotations

import concurrent.futures
import hashlib
import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

import requests

from airlift.errors import FetchError, ResolveError
from airlift.images.reference import ImageReference, InvalidReferenceError, parse_reference

log = logging.getLogger("airlift")

MANIFEST_MEDIA_TYPES = (
    "application/vnd.oci.image.index.v1+json",
    "application/vnd.oci.image.manifest.v1+json",
    "application/vnd.docker.distribution.manifest.list.v2+json",
    "application/vnd.docker.distribution.manifest.v2+json",
)

_CHALLENGE_PARAM = re.compile(r'(\w+)="([^"]*)"')


@dataclass(frozen=True)
class ResolvedImage:
    reference: str
    digest: str
    media_type: str
    size: int
    manifest: Dict[str, Any] = field(compare=False, repr=False)


def _parse_challenge(header: str) -> Optional[Dict[str, str]]:
    scheme, _, params = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return dict(_CHALLENGE_PARAM.findall(params))


class ImageResolver:
    """
    Resolves image references to manifest digests against their registries
    (OCI distribution API).

    Resolution is all-or-nothing: if any reference fails, ``resolve`` raises
    ``ResolveError`` listing every failure and returns nothing.
    """

    def __init__(
        self,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
        max_workers: int = 4,
    ):
        self._session = session or requests.Session()
        self.timeout = timeout
        self.max_workers = max_workers

    # -----------------------
    # Registry helpers
    # -----------------------
    def _token(self, challenge: Dict[str, str], ref: ImageReference, url: str, timeout: float) -> str:
        realm = challenge.get("realm")
        if not realm:
            raise FetchError(f"auth challenge without realm from {url}", url=url)

        params = {"scope": challenge.get("scope") or f"repository:{ref.repository}:pull"}
        if challenge.get("service"):
            params["service"] = challenge["service"]

        try:
            r = self._session.get(realm, params=params, timeout=timeout)
        except requests.RequestException as e:
            raise FetchError(f"token request to {realm} failed: {e}", url=realm) from e
        if r.status_code != 200:
            raise FetchError(f"token request to {realm} failed: HTTP {r.status_code}", url=realm)

        try:
            body = r.json()
        except ValueError as e:
            raise FetchError(f"token response from {realm} is not JSON", url=realm) from e
        if not isinstance(body, dict):
            raise FetchError(f"token response from {realm} is not a JSON object", url=realm)
        token = body.get("token") or body.get("access_token")
        if not token:
            raise FetchError(f"no token in response from {realm}", url=realm)
        return token

    def _get_manifest(self, ref: ImageReference, timeout: float) -> requests.Response:
        url = f"https://{ref.api_host}/v2/{ref.repository}/manifests/{ref.identifier}"
        headers = {"Accept": ", ".join(MANIFEST_MEDIA_TYPES)}

        try:
            r = self._session.get(url, headers=headers, timeout=timeout)
            if r.status_code == 401:
                challenge = _parse_challenge(r.headers.get("WWW-Authenticate", ""))
                if challenge is not None:
                    headers["Authorization"] = f"Bearer {self._token(challenge, ref, url, timeout)}"
                    r = self._session.get(url, headers=headers, timeout=timeout)
        except requests.RequestException as e:
            raise FetchError(f"GET {url} failed: {e}", url=url) from e

        if r.status_code == 404:
            raise FetchError(f"manifest not found at {url}", url=url)
        if r.status_code in (401, 403):
            raise FetchError(f"unauthorized for {url}: HTTP {r.status_code}", url=url)
        if r.status_code != 200:
            raise FetchError(f"GET {url} failed: HTTP {r.status_code}", url=url)
        return r

    def resolve_one(self, raw: str, *, timeout: Optional[float] = None) -> ResolvedImage:
        ref = parse_reference(raw)
        r = self._get_manifest(ref, self.timeout if timeout is None else timeout)

        body = r.content
        computed = "sha256:" + hashlib.sha256(body).hexdigest()
        digest = r.headers.get("Docker-Content-Digest") or computed
        if ref.digest and ref.digest.startswith("sha256:") and ref.digest != computed:
            raise FetchError(f"digest mismatch for {raw}: registry served {computed}")

        try:
            manifest = r.json()
        except ValueError as e:
            raise FetchError(f"manifest for {raw} is not JSON") from e
        if not isinstance(manifest, dict):
            raise FetchError(f"manifest for {raw} is not a JSON object")

        media_type = r.headers.get("Content-Type", "").split(";")[0].strip() or manifest.get("mediaType", "")
        log.debug("Resolved %s -> %s", raw, digest)
        return ResolvedImage(
            reference=raw,
            digest=digest,
            media_type=media_type,
            size=len(body),
            manifest=manifest,
        )

    # -----------------------
    # Bulk resolution
    # -----------------------
    def resolve(
        self,
        refs: Iterable[str],
        *,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, ResolvedImage]:
        unique = list(dict.fromkeys(refs))

        def _task(raw: str) -> ResolvedImage:
            if cancel is not None and cancel.is_set():
                raise FetchError("cancelled before resolution started")
            return self.resolve_one(raw, timeout=timeout)

        results: Dict[str, ResolvedImage] = {}
        failures: Dict[str, str] = {}
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {raw: pool.submit(_task, raw) for raw in unique}
            for raw, fut in futures.items():
                try:
                    results[raw] = fut.result()
                except (FetchError, InvalidReferenceError) as e:
                    failures[raw] = str(e)

        if failures:
            for raw, reason in failures.items():
                log.error("Image %s: %s", raw, reason)
            raise ResolveError(failures)

        log.info("Resolved %d image(s)", len(results))
        return {raw: results[raw] for raw in unique}
