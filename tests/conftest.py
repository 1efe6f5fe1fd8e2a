from __future__ import annotations

import base64
from typing import Callable, Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient

from removebg_service import config
from removebg_service.api import app, get_admin_authenticator, get_app_proxy_authenticator, get_gateway
from removebg_service.auth import ShopSession
from removebg_service.gateway import BackgroundRemovalGateway
from removebg_service.provider import GatewayResult

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 40
JPEG_BYTES = b"\xff\xd8\xff\xe0" + bytes(reversed(range(256))) * 40
SHOP_SESSION = ShopSession(shop="demo.myshopify.com", user_id="42")


class StubProvider:
    """Records calls in place of remove.bg."""

    def __init__(self, encoded_image: str = "", error: Optional[Exception] = None) -> None:
        self.encoded_image = encoded_image or base64.b64encode(PNG_BYTES).decode("ascii")
        self.error = error
        self.payload_calls: List[dict] = []
        self.url_calls: List[dict] = []

    @property
    def call_count(self) -> int:
        return len(self.payload_calls) + len(self.url_calls)

    def submit_by_encoded_payload(self, **kwargs) -> GatewayResult:
        self.payload_calls.append(kwargs)
        return self._answer()

    def submit_by_url(self, **kwargs) -> GatewayResult:
        self.url_calls.append(kwargs)
        return self._answer()

    def _answer(self) -> GatewayResult:
        if self.error is not None:
            raise self.error
        return GatewayResult(encoded_image=self.encoded_image)


class StubAuthenticator:
    def __init__(self, session: Optional[ShopSession]) -> None:
        self.session = session

    def authenticate(self, request) -> Optional[ShopSession]:
        return self.session


@pytest.fixture
def provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def make_client(provider: StubProvider) -> Iterator[Callable[..., TestClient]]:
    def _make(api_key: Optional[str] = "test-key", session: Optional[ShopSession] = SHOP_SESSION) -> TestClient:
        settings = config.Settings(_env_file=None, remove_bg_api_key=api_key)
        app.dependency_overrides[config.get_settings] = lambda: settings
        app.dependency_overrides[get_gateway] = lambda: BackgroundRemovalGateway(provider)
        app.dependency_overrides[get_app_proxy_authenticator] = lambda: StubAuthenticator(session)
        app.dependency_overrides[get_admin_authenticator] = lambda: StubAuthenticator(session)
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()
