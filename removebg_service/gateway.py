"""
Background-removal gateway.

`BackgroundRemovalGateway.remove_background` is the single internal
operation used by both HTTP handlers. It keeps orchestration simple:
source -> (base64 when raw bytes) -> remove.bg -> base64 PNG out.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
import logging

from .config import Settings
from .errors import Misconfigured, ProviderError
from .intake import ImageSource, RawBytes, ReferenceUrl
from .provider import GatewayResult, RemovalProvider

logger = logging.getLogger(__name__)

RESULT_SIZE = "regular"
SUBJECT_TYPE = "auto"


@dataclass(frozen=True)
class ProviderCredentials:
    api_key: str

    def __repr__(self) -> str:
        return "ProviderCredentials(api_key=***)"


def load_credentials(settings: Settings) -> ProviderCredentials:
    """
    Fast-fail guard run before any provider call.

    Raises:
        Misconfigured: when REMOVE_BG_API_KEY is absent or blank.
    """
    api_key = (settings.remove_bg_api_key or "").strip()
    if not api_key:
        raise Misconfigured("Missing REMOVE_BG_API_KEY environment variable")
    return ProviderCredentials(api_key=api_key)


def encode_payload(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_payload(encoded: str) -> bytes:
    """Decode provider base64; garbage text is a provider fault."""
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ProviderError("remove.bg returned an undecodable image") from exc


class BackgroundRemovalGateway:
    def __init__(self, provider: RemovalProvider) -> None:
        self.provider = provider

    def remove_background(self, source: ImageSource, credentials: ProviderCredentials) -> GatewayResult:
        """
        Submit `source` to remove.bg once.

        Raises:
            ProviderError: for any failure of the call, with a readable message.
        """
        try:
            if isinstance(source, RawBytes):
                logger.info("Submitting %d uploaded bytes to remove.bg", len(source.data))
                return self.provider.submit_by_encoded_payload(
                    encoded_payload=encode_payload(source.data),
                    api_key=credentials.api_key,
                    result_size=RESULT_SIZE,
                    subject_type=SUBJECT_TYPE,
                )
            if isinstance(source, ReferenceUrl):
                logger.info("Submitting image url=%s to remove.bg", source.url)
                return self.provider.submit_by_url(
                    url=source.url,
                    api_key=credentials.api_key,
                    result_size=RESULT_SIZE,
                    subject_type=SUBJECT_TYPE,
                )
        except ProviderError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ProviderError(str(exc) or exc.__class__.__name__) from exc
        raise TypeError(f"Unsupported image source: {source!r}")
