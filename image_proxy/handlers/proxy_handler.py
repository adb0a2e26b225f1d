"""Signed image proxy endpoint."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, Request, Response
from starlette.concurrency import run_in_threadpool

from image_proxy.config import Settings, get_settings
from image_proxy.errors import AuthError
from image_proxy.models import select_format
from image_proxy.services.fetcher import ImageFetcher
from image_proxy.services.origin import is_origin_allowed
from image_proxy.services.params import parse_and_verify_params
from image_proxy.services.transform import encode_image
from image_proxy.services.url_builder import PROXY_PATH

router = APIRouter()
logger = logging.getLogger(__name__)

STALE_WHILE_REVALIDATE_CAP = 86_400


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def get_fetcher(request: Request) -> ImageFetcher:
    return request.app.state.fetcher


def cache_control(max_age: int) -> str:
    swr = min(max_age, STALE_WHILE_REVALIDATE_CAP)
    return f"public, max-age={max_age}, s-maxage={max_age}, stale-while-revalidate={swr}"


# ---------------------------------------------------------------------------
# GET proxy
# ---------------------------------------------------------------------------


@router.get(PROXY_PATH)
async def proxy_image(
    request: Request,
    settings: Settings = Depends(get_settings),
    fetcher: ImageFetcher = Depends(get_fetcher),
    accept: str | None = Header(None),
):
    """Fetch, resize and re-encode a signed source image."""
    params = parse_and_verify_params(request.query_params, settings)

    if not is_origin_allowed(params.url, settings):
        logger.warning("Origin not allowed: %s", params.url[:80])
        raise AuthError("Origin not allowed")

    target_width = params.width or settings.default_width
    quality = params.quality or settings.default_quality

    source = await fetcher.fetch_bytes(
        params.url,
        timeout=settings.fetch_timeout,
        max_bytes=settings.max_source_bytes,
        user_agent=settings.user_agent,
        is_allowed=lambda url: is_origin_allowed(url, settings),
    )
    fmt = select_format(accept)
    image = await run_in_threadpool(
        encode_image, source, fmt, target_width=target_width, quality=quality
    )
    logger.debug(
        "Served %s as %s %dx%d (natural %dx%d, %s, %d bytes)",
        params.url[:80],
        fmt.value,
        image.width,
        image.height,
        image.natural_width,
        image.natural_height,
        "resized" if image.resized else "natural size",
        len(image.content),
    )

    return Response(
        content=image.content,
        media_type=fmt.mime_type,
        headers={
            "Cache-Control": cache_control(settings.cache_max_age),
            "Content-Length": str(len(image.content)),
            "Vary": "Accept",
        },
    )
