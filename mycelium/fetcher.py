from __future__ import annotations

import httpx
from pydantic import ValidationError

from .models import DESIRED_SERVERS, DesiredServer


class FetchFailed(Exception):
    """The desired topology could not be fetched or decoded."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"could not sync server list from {url}: {reason}")
        self.url = url
        self.reason = reason


def servers_url(endpoint: str, identity: str) -> str:
    base = endpoint.rstrip("/")
    if "://" not in base:
        base = f"http://{base}"
    return f"{base}/servers/{identity.strip('/')}"


def fetch(endpoint: str, identity: str, transport: httpx.BaseTransport | None = None) -> list[DesiredServer]:
    """Fetch the servers the control plane wants for ``identity``.

    ``identity`` is ``namespace/name`` (or ``namespace/env/tag`` on older
    control planes). Any connection, HTTP or decode problem fails the whole
    fetch with :class:`FetchFailed`; records are never partially accepted.
    """
    url = servers_url(endpoint, identity)
    try:
        with httpx.Client(transport=transport, follow_redirects=False) as client:
            resp = client.get(url, headers={"Accept": "application/json"})
    except httpx.HTTPError as e:
        raise FetchFailed(url, f"{type(e).__name__}: {e}") from e

    if resp.status_code != 200:
        raise FetchFailed(url, f"HTTP {resp.status_code}")
    try:
        return DESIRED_SERVERS.validate_json(resp.content)
    except ValidationError as e:
        raise FetchFailed(url, f"invalid payload ({e.error_count()} errors)") from e
