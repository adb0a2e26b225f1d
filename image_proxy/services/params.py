"""Parsing and verification of inbound proxy query parameters."""
from __future__ import annotations

import logging
from typing import Mapping

from image_proxy.config import Settings
from image_proxy.errors import AuthError, ValidationError
from image_proxy.models import ProxyParams
from image_proxy.services.signing import verify

logger = logging.getLogger(__name__)

MAX_QUALITY = 100


def _parse_bounded_int(raw: str | None, name: str, upper: int) -> int | None:
    if raw is None or raw == "":
        return None
    # ASCII digits only: no sign, whitespace, underscores or non-Latin digits
    value = int(raw) if raw.isascii() and raw.isdigit() else None
    if value is None or value < 1 or value > upper:
        raise ValidationError(f"Invalid {name}: must be 1-{upper}", status_code=400)
    return value


def parse_and_verify_params(query: Mapping[str, str], settings: Settings) -> ProxyParams:
    """Validate ``url``/``w``/``q``/``sig`` and check the signature.

    Checks run in a fixed order, each with its own status: missing url (400),
    missing sig (401), bad w (400), bad q (400), bad signature (403).

    The signature is verified over the url exactly as received; the returned
    url is stripped of surrounding whitespace.
    """

    url = query.get("url")
    sig = query.get("sig")

    if not url or not url.strip():
        raise ValidationError("Missing url parameter", status_code=400)
    if not sig or not sig.strip():
        raise ValidationError("Missing sig parameter", status_code=401)

    width = _parse_bounded_int(query.get("w"), "w", settings.max_width)
    quality = _parse_bounded_int(query.get("q"), "q", MAX_QUALITY)

    if not verify(url, width, quality, sig, secret=settings.secret):
        logger.warning("Rejected proxy request with invalid signature for %s", url[:80])
        raise AuthError("Invalid signature")

    return ProxyParams(url=url.strip(), width=width, quality=quality)
