"""Async access to the read-public endpoints of the ORCID v3.0 API.

No authentication is needed. Reuse one ``httpx.AsyncClient`` across calls
so that connections are pooled.
"""

from __future__ import annotations

import io
import sys
from typing import Callable, TypeVar

import httpx

from orcid_works.model import ModelError, OrcidWorkDetail, OrcidWorks

BASE = "https://pub.orcid.org/v3.0"
JSON_ACCEPT = "application/json"

T = TypeVar("T")


class OrcidApiError(RuntimeError):
    """Raised when a request fails or the API answers with an error status."""


async def _get(client: httpx.AsyncClient, url: str, label: str) -> bytes:
    try:
        response = await client.get(url, headers={"Accept": JSON_ACCEPT})
    except httpx.HTTPError as exc:
        raise OrcidApiError(f"GET {url}: {exc}") from exc
    if not response.is_success:
        raise OrcidApiError(
            f"ORCID {label} returned HTTP {response.status_code} {response.reason_phrase}"
        )
    return response.content


def _parse(content: bytes, label: str, parse: Callable[[io.BytesIO], T]) -> T:
    try:
        return parse(io.BytesIO(content))
    except ModelError as exc:
        print(f"[orcid-fetch] {label} parse error at {exc.path}: {exc}", file=sys.stderr)
        raise


async def fetch_works(client: httpx.AsyncClient, orcid: str) -> OrcidWorks:
    """GET ``/v3.0/{orcid}/works``: the grouped work summaries of a record."""
    content = await _get(client, f"{BASE}/{orcid}/works", "/works")
    return _parse(content, "/works", OrcidWorks.from_reader)


async def fetch_work_detail(
    client: httpx.AsyncClient, orcid: str, putcode: int
) -> OrcidWorkDetail:
    """GET ``/v3.0/{orcid}/work/{putcode}``: one full work record."""
    label = f"/work/{putcode}"
    content = await _get(client, f"{BASE}/{orcid}/work/{putcode}", label)
    return _parse(content, label, OrcidWorkDetail.from_reader)