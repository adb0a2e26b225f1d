"""Outbound fetch of source images.

One :class:`ImageFetcher` (and its connection pool) is shared by all
requests; it is opened in the application lifespan and closed on shutdown.
Redirects are followed by hand so every hop can be checked against the
origin allowlist.
"""
from __future__ import annotations

import logging
from typing import Callable
from urllib.parse import urljoin

import httpx

from image_proxy.errors import AuthError, UpstreamError

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 5


class ImageFetcher:  # pylint: disable=too-few-public-methods
    """Minimal async client for downloading source image bytes."""

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client or httpx.AsyncClient(
            follow_redirects=False,
            headers={"Accept": "image/*,*/*;q=0.8"},
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch_bytes(
        self,
        url: str,
        *,
        timeout: float,
        max_bytes: int,
        user_agent: str | None = None,
        is_allowed: Callable[[str], bool] | None = None,
    ) -> bytes:
        """Download *url* and return its body.

        Up to ``MAX_REDIRECTS`` redirects are followed; a hop whose target
        fails *is_allowed* raises AuthError. Raises UpstreamError for
        transport failures, timeouts, non-2xx statuses, redirect loops and
        bodies larger than *max_bytes*.
        """

        headers = {"User-Agent": user_agent} if user_agent else None
        current = url
        try:
            for _ in range(MAX_REDIRECTS + 1):
                logger.debug("GET source %s", current[:80])
                async with self._client.stream(
                    "GET", current, headers=headers, timeout=timeout, follow_redirects=False
                ) as resp:
                    if resp.is_redirect:
                        current = self._redirect_target(current, resp, is_allowed)
                        continue
                    if not resp.is_success:
                        logger.warning("Upstream returned %s for %s", resp.status_code, current[:80])
                        raise UpstreamError(f"Upstream returned {resp.status_code}")
                    return await self._read_limited(resp, max_bytes)
        except httpx.TimeoutException as exc:
            logger.warning("Upstream fetch timed out: %s", current[:80])
            raise UpstreamError("Upstream fetch timed out") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Upstream fetch failed for %s: %s", current[:80], exc)
            raise UpstreamError(f"Fetch failed: {exc}") from exc

        logger.warning("Too many redirects fetching %s", url[:80])
        raise UpstreamError("Upstream redirected too many times")

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _redirect_target(
        current: str,
        resp: httpx.Response,
        is_allowed: Callable[[str], bool] | None,
    ) -> str:
        target = urljoin(current, resp.headers["Location"])
        if is_allowed is not None and not is_allowed(target):
            logger.warning("Redirect to disallowed origin: %s -> %s", current[:80], target[:80])
            raise AuthError("Origin not allowed")
        return target

    @staticmethod
    async def _read_limited(resp: httpx.Response, max_bytes: int) -> bytes:
        declared = resp.headers.get("Content-Length")
        if declared and declared.isdigit() and int(declared) > max_bytes:
            raise UpstreamError(f"Upstream image exceeds {max_bytes} bytes")
        chunks: list[bytes] = []
        received = 0
        async for chunk in resp.aiter_bytes():
            received += len(chunk)
            if received > max_bytes:
                raise UpstreamError(f"Upstream image exceeds {max_bytes} bytes")
            chunks.append(chunk)
        return b"".join(chunks)
