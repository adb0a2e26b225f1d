"""Helpers that compose signed proxy URLs for callers rendering images.

Never add or rewrite query parameters on a URL returned from here; the
signature covers url, w and q.
"""
from __future__ import annotations

from typing import Iterable
from urllib.parse import urlencode, urljoin

from image_proxy.config import Settings
from image_proxy.services.signing import sign_params

PROXY_PATH = "/proxy"


def build_signed_url(
    base_url: str,
    source_url: str,
    *,
    width: int | None = None,
    quality: int | None = None,
    settings: Settings,
) -> str:
    """Return ``{base_url}/proxy?url=...&w=...&q=...&sig=...`` for *source_url*."""

    sig = sign_params(source_url, width, quality, settings)
    query: list[tuple[str, str]] = [("url", source_url)]
    if width is not None:
        query.append(("w", str(width)))
    if quality is not None:
        query.append(("q", str(quality)))
    query.append(("sig", sig))
    return f"{urljoin(base_url, PROXY_PATH)}?{urlencode(query)}"


def build_srcset(
    base_url: str,
    source_url: str,
    widths: Iterable[int],
    *,
    quality: int | None = None,
    settings: Settings,
) -> str:
    """Return a responsive ``srcset`` value, one signed URL per width, in the given order."""

    entries = []
    for width in widths:
        url = build_signed_url(base_url, source_url, width=width, quality=quality, settings=settings)
        entries.append(f"{url} {width}w")
    return ", ".join(entries)


def proxy_image_src(
    source_url: str,
    *,
    width: int | None = None,
    quality: int | None = None,
    settings: Settings,
) -> str:
    return build_signed_url(settings.public_base_url, source_url, width=width, quality=quality, settings=settings)


def proxy_image_srcset(
    source_url: str,
    widths: Iterable[int],
    *,
    quality: int | None = None,
    settings: Settings,
) -> str:
    return build_srcset(settings.public_base_url, source_url, widths, quality=quality, settings=settings)
