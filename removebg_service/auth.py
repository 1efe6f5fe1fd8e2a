"""
Session collaborators.

Both handlers need a validated caller before touching the request body.
Storefront uploads arrive through a Shopify app proxy and carry an HMAC
`signature` query parameter; the embedded admin sends a bearer session
token (HS256 JWT). Either check returns a `ShopSession` or `None`.
"""

from __future__ import annotations

from dataclasses import dataclass
import hashlib
import hmac
import logging
from typing import Optional, Protocol
from urllib.parse import urlparse

import jwt
from fastapi import Request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShopSession:
    shop: str
    user_id: Optional[str] = None


class SessionAuthenticator(Protocol):
    def authenticate(self, request: Request) -> Optional[ShopSession]: ...


def app_proxy_signature(params: dict, secret: str) -> str:
    """
    Compute the app proxy signature for `params` (name -> list of values).

    Shopify sorts the parameters, renders each as `name=value` with
    multiple values joined by commas, concatenates them without a
    separator and signs the result with the app secret.
    """
    message = "".join(
        f"{name}={','.join(values)}" for name, values in sorted(params.items()) if name != "signature"
    )
    return hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


class AppProxyAuthenticator:
    def __init__(self, api_secret: Optional[str]) -> None:
        self.api_secret = api_secret

    def authenticate(self, request: Request) -> Optional[ShopSession]:
        if not self.api_secret:
            logger.error("SHOPIFY_API_SECRET is not set; rejecting app proxy request")
            return None
        query = request.query_params
        signature = query.get("signature")
        shop = query.get("shop")
        if not signature or not shop:
            logger.warning("App proxy request without signature or shop")
            return None

        params = {name: query.getlist(name) for name in query.keys()}
        expected = app_proxy_signature(params, self.api_secret)
        if not hmac.compare_digest(expected, signature):
            logger.warning("App proxy signature mismatch for shop=%s", shop)
            return None
        return ShopSession(shop=shop, user_id=query.get("logged_in_customer_id") or None)


class AdminSessionAuthenticator:
    def __init__(self, api_key: Optional[str], api_secret: Optional[str]) -> None:
        self.api_key = api_key
        self.api_secret = api_secret

    def authenticate(self, request: Request) -> Optional[ShopSession]:
        if not self.api_key or not self.api_secret:
            logger.error("SHOPIFY_API_KEY/SHOPIFY_API_SECRET are not set; rejecting admin request")
            return None
        header = request.headers.get("authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            logger.warning("Admin request without bearer session token")
            return None

        try:
            payload = jwt.decode(
                token.strip(),
                self.api_secret,
                algorithms=["HS256"],
                audience=self.api_key,
                options={"require": ["exp", "dest"]},
            )
        except jwt.InvalidTokenError as exc:
            logger.warning("Invalid session token: %s", exc)
            return None

        shop = urlparse(str(payload["dest"])).hostname
        if not shop:
            logger.warning("Session token dest claim has no host")
            return None
        return ShopSession(shop=shop, user_id=payload.get("sub"))
