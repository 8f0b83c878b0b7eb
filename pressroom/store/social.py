"""Social post metadata stores.

:class:`HTTPSocialStore` fetches metadata from a JSON endpoint keyed by post
id. Caching and rate limiting belong to the endpoint; this client makes one
request per lookup and never retries.

:class:`StaticSocialStore` serves metadata from a mapping, loaded from a
YAML or JSON fixtures file, for offline builds and tests.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx
import yaml

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class SocialFetchError(Exception):
    """Raised when post metadata cannot be fetched."""

    def __init__(self, post_id: str, reason: str) -> None:
        super().__init__(f"Failed to fetch metadata for post {post_id}: {reason}")
        self.post_id = post_id


class HTTPSocialStore:
    """Fetches post metadata from ``GET <endpoint>?id=<post_id>``.

    Usage::

        async with HTTPSocialStore(endpoint) as social:
            metadata = await social.get_metadata_by_id("123456")

    Parameters
    ----------
    endpoint:
        Metadata endpoint URL.
    timeout:
        Per-request timeout in seconds.
    client:
        Optional pre-built ``httpx.AsyncClient`` (e.g. with a mock
        transport). The store does not close a client it did not create.
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.endpoint = endpoint
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> HTTPSocialStore:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get_metadata_by_id(self, post_id: str) -> Any:
        try:
            response = await self._client.get(self.endpoint, params={"id": post_id})
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise SocialFetchError(post_id, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise SocialFetchError(post_id, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise SocialFetchError(post_id, f"invalid JSON: {exc}") from exc


class StaticSocialStore:
    """Serves post metadata from an in-memory mapping of id -> metadata."""

    def __init__(self, metadata: dict[str, Any] | None = None) -> None:
        self._metadata = {str(k): v for k, v in (metadata or {}).items()}

    @classmethod
    def from_file(cls, path: Path) -> StaticSocialStore:
        """Load a YAML (or JSON) mapping of post id -> metadata."""
        raw = yaml.safe_load(Path(path).read_text())
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError(f"Social fixtures must be a mapping, got {type(raw).__name__}")
        log.info("Loaded metadata for %d social post(s) from %s", len(raw), path)
        return cls(raw)

    async def get_metadata_by_id(self, post_id: str) -> Any:
        if post_id not in self._metadata:
            raise SocialFetchError(post_id, "not in fixtures")
        return self._metadata[post_id]
