"""HMAC signing of proxy request parameters.

The signed message is the canonical payload::

    {url}|{width or ""}|{quality or ""}

An absent width or quality is an empty field, so a URL signed without ``w``
cannot be replayed with one added. The layout is a wire contract: every
issued URL stops verifying if it changes. Bump ``PAYLOAD_VERSION`` and
carry the old form alongside if it ever has to.
"""
from __future__ import annotations

import hashlib
import hmac

from image_proxy.config import Settings

PAYLOAD_VERSION = 1
PAYLOAD_DELIMITER = "|"


def build_payload(url: str, width: int | None = None, quality: int | None = None) -> str:
    parts = [url, "" if width is None else str(width), "" if quality is None else str(quality)]
    return PAYLOAD_DELIMITER.join(parts)


def sign(url: str, width: int | None = None, quality: int | None = None, *, secret: str) -> str:
    """Return the lowercase hex HMAC-SHA256 digest for the given parameters."""

    return hmac.new(
        key=secret.encode(),
        msg=build_payload(url, width, quality).encode(),
        digestmod=hashlib.sha256,
    ).hexdigest()


def verify(
    url: str,
    width: int | None,
    quality: int | None,
    provided: str,
    *,
    secret: str,
) -> bool:
    """Check *provided* against the expected digest in constant time.

    Digests of the wrong length and malformed hex are rejected without raising.
    """

    expected = sign(url, width, quality, secret=secret)
    if len(expected) != len(provided):
        return False
    try:
        provided_bytes = bytes.fromhex(provided)
    except ValueError:
        return False
    return hmac.compare_digest(bytes.fromhex(expected), provided_bytes)


def sign_params(url: str, width: int | None, quality: int | None, settings: Settings) -> str:
    return sign(url, width, quality, secret=settings.secret)
