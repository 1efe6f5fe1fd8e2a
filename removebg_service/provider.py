"""
remove.bg HTTP client.

The provider exposes two call shapes: submit a base64 payload, or submit a
URL for remove.bg to fetch. Both answer with the processed PNG as base64.
Every failure mode surfaces as a single `ProviderError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import logging
from typing import Any, Dict, Optional, Protocol

import requests

from . import config
from .errors import ProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayResult:
    encoded_image: str


class RemovalProvider(Protocol):
    def submit_by_encoded_payload(
        self, *, encoded_payload: str, api_key: str, result_size: str, subject_type: str
    ) -> GatewayResult: ...

    def submit_by_url(
        self, *, url: str, api_key: str, result_size: str, subject_type: str
    ) -> GatewayResult: ...


def _error_message(resp: requests.Response) -> str:
    """Prefer remove.bg's own error titles over the bare status line."""
    try:
        errors = resp.json().get("errors") or []
        titles = [str(err.get("title")) for err in errors if isinstance(err, dict) and err.get("title")]
    except (ValueError, AttributeError):
        titles = []
    if titles:
        return "; ".join(titles)
    return f"remove.bg returned HTTP {resp.status_code}"


class RemoveBgClient:
    """Thin `requests` wrapper around the remove.bg `/removebg` endpoint."""

    def __init__(
        self,
        endpoint: str = config.DEFAULT_REMOVE_BG_ENDPOINT,
        timeout_seconds: float = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    def submit_by_encoded_payload(
        self, *, encoded_payload: str, api_key: str, result_size: str, subject_type: str
    ) -> GatewayResult:
        return self._submit({"image_file_b64": encoded_payload}, api_key, result_size, subject_type)

    def submit_by_url(
        self, *, url: str, api_key: str, result_size: str, subject_type: str
    ) -> GatewayResult:
        return self._submit({"image_url": url}, api_key, result_size, subject_type)

    def _submit(
        self, fields: Dict[str, Any], api_key: str, result_size: str, subject_type: str
    ) -> GatewayResult:
        data = dict(fields, size=result_size, type=subject_type)
        headers = {"X-Api-Key": api_key, "Accept": "application/json"}
        try:
            resp = self._session.post(
                self.endpoint,
                data=data,
                headers=headers,
                timeout=(5, self.timeout_seconds),
            )
        except requests.RequestException as exc:
            raise ProviderError(f"Could not reach remove.bg: {exc}") from exc

        if resp.status_code != 200:
            raise ProviderError(_error_message(resp))

        try:
            encoded = resp.json()["data"]["result_b64"]
        except (ValueError, KeyError, TypeError) as exc:
            raise ProviderError("Malformed response from remove.bg") from exc
        if not isinstance(encoded, str) or not encoded:
            raise ProviderError("Malformed response from remove.bg")

        logger.debug("remove.bg answered with %d base64 chars", len(encoded))
        return GatewayResult(encoded_image=encoded)


@lru_cache()
def get_provider() -> RemoveBgClient:
    """Shared client so the underlying connection pool is reused."""
    settings = config.get_settings()
    return RemoveBgClient(
        endpoint=settings.remove_bg_endpoint,
        timeout_seconds=settings.request_timeout_seconds,
    )
