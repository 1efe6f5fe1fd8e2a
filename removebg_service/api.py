"""
FastAPI layer exposing remove.bg background removal.

Endpoints:
 - GET /health
 - POST /api/remove   direct upload (storefront, app proxy), answers image/png
 - POST /app/remove   catalog-aware (embedded admin), answers JSON with base64
"""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from . import config
from .auth import AdminSessionAuthenticator, AppProxyAuthenticator, SessionAuthenticator
from .errors import BadInput, Misconfigured, ProviderError, Unauthenticated
from .gateway import BackgroundRemovalGateway, decode_payload, load_credentials
from .intake import InboundImageRequest, display_name, read_image_source
from .provider import get_provider

settings = config.get_settings()
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="remove.bg Background Removal Service", version="0.1.0")

DIRECT_NOT_CONFIGURED = "Background removal service not configured"
CATALOG_NOT_CONFIGURED = "Background removal service not configured (missing API key)."
PROCESSING_FAILED = "Failed to process image"


class CatalogRemovalResponse(BaseModel):
    success: bool = True
    processedImageBase64: str
    originalName: str


def get_gateway() -> BackgroundRemovalGateway:
    return BackgroundRemovalGateway(get_provider())


def get_app_proxy_authenticator(
    settings: config.Settings = Depends(config.get_settings),
) -> SessionAuthenticator:
    return AppProxyAuthenticator(settings.shopify_api_secret)


def get_admin_authenticator(
    settings: config.Settings = Depends(config.get_settings),
) -> SessionAuthenticator:
    return AdminSessionAuthenticator(settings.shopify_api_key, settings.shopify_api_secret)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/api/remove")
async def remove_direct(
    request: Request,
    settings: config.Settings = Depends(config.get_settings),
    authenticator: SessionAuthenticator = Depends(get_app_proxy_authenticator),
    gateway: BackgroundRemovalGateway = Depends(get_gateway),
):
    try:
        session = authenticator.authenticate(request)
        if session is None:
            raise Unauthenticated()
        form = await request.form()
        inbound = InboundImageRequest(session=session, source=await read_image_source(form, accept_url=False))
        credentials = load_credentials(settings)
        result = await run_in_threadpool(gateway.remove_background, inbound.source, credentials)
        png_bytes = decode_payload(result.encoded_image)
    except Unauthenticated as exc:
        return PlainTextResponse(exc.message, status_code=exc.status_code)
    except BadInput as exc:
        return _error(exc.message, exc.status_code)
    except Misconfigured as exc:
        logger.error(exc.message)
        return _error(DIRECT_NOT_CONFIGURED, exc.status_code)
    except ProviderError as exc:
        logger.error("Error from remove.bg API: %s", exc.message, exc_info=exc)
        return _error(PROCESSING_FAILED, exc.status_code)

    return Response(
        content=png_bytes,
        media_type="image/png",
        headers={"Content-Length": str(len(png_bytes))},
    )


@app.post("/app/remove", response_model=CatalogRemovalResponse)
async def remove_from_catalog(
    request: Request,
    settings: config.Settings = Depends(config.get_settings),
    authenticator: SessionAuthenticator = Depends(get_admin_authenticator),
    gateway: BackgroundRemovalGateway = Depends(get_gateway),
):
    try:
        session = authenticator.authenticate(request)
        if session is None:
            raise Unauthenticated()
        form = await request.form()
        inbound = InboundImageRequest(session=session, source=await read_image_source(form, accept_url=True))
        credentials = load_credentials(settings)
        result = await run_in_threadpool(gateway.remove_background, inbound.source, credentials)
    except (Unauthenticated, BadInput) as exc:
        return _error(exc.message, exc.status_code)
    except Misconfigured as exc:
        logger.error(exc.message)
        return _error(CATALOG_NOT_CONFIGURED, exc.status_code)
    except ProviderError as exc:
        logger.error("Error from remove.bg API: %s", exc.message, exc_info=exc)
        return _error(f"{PROCESSING_FAILED}: {exc.message}", exc.status_code)

    return CatalogRemovalResponse(
        processedImageBase64=result.encoded_image,
        originalName=display_name(inbound.source),
    )
