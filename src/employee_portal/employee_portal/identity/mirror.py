"""Identity-provider metadata mirror.

The profile store is authoritative for roles; this only copies the role into
the identity provider's user metadata so sign-in redirects pick it up. Writes
replace the whole blob, so they are idempotent and safe to retry.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

import httpx

from ..core.constants import DEFAULT_IDENTITY_MIRROR_RETRIES, DEFAULT_IDENTITY_TIMEOUT_SECONDS
from ..core.exceptions import InfrastructureError

logger = logging.getLogger(__name__)


class IdentityMirrorError(InfrastructureError):
    pass


class IdentityMetadataMirror(Protocol):
    def set_metadata(self, external_id: str, metadata: Mapping[str, Any]) -> None:
        raise NotImplementedError


class DisabledMetadataMirror(IdentityMetadataMirror):
    """Used when no identity API is configured (local development)."""

    def set_metadata(self, external_id: str, metadata: Mapping[str, Any]) -> None:
        logger.debug("Identity mirror disabled; skipping metadata for %s", external_id)


class HttpIdentityMetadataMirror(IdentityMetadataMirror):
    """PATCHes `{base_url}/v1/users/{external_id}/metadata` with a bearer secret."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        http_client: Optional[httpx.Client] = None,
        timeout_seconds: float = DEFAULT_IDENTITY_TIMEOUT_SECONDS,
        retries: int = DEFAULT_IDENTITY_MIRROR_RETRIES,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._http = http_client or httpx.Client(timeout=timeout_seconds)
        self._retries = max(0, int(retries))

    def set_metadata(self, external_id: str, metadata: Mapping[str, Any]) -> None:
        url = f"{self._base_url}/v1/users/{external_id}/metadata"
        body = {"unsafe_metadata": dict(metadata), "public_metadata": {"role": metadata.get("role")}}
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        last_error: Optional[Exception] = None
        for attempt in range(1, self._retries + 2):
            try:
                response = self._http.patch(url, json=body, headers=headers)
                response.raise_for_status()
                return
            except httpx.HTTPStatusError as e:
                last_error = e
                logger.warning(
                    "Identity metadata update failed: user=%s status=%d attempt=%d",
                    external_id,
                    e.response.status_code,
                    attempt,
                )
                # 4xx will not get better on retry
                if e.response.status_code < 500:
                    break
            except httpx.RequestError as e:
                last_error = e
                logger.warning(
                    "Identity metadata request failed: user=%s attempt=%d error=%s",
                    external_id,
                    attempt,
                    e,
                )

        raise IdentityMirrorError(f"Could not update identity metadata for {external_id}") from last_error
