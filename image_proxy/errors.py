"""Error taxonomy for the image proxy.

Every error carries the HTTP status it maps to; the application turns any
:class:`ProxyError` into a ``{"error": message}`` JSON body with that status.
"""
from __future__ import annotations


class ProxyError(Exception):
    """Base class for failures that terminate a proxy request."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConfigError(ProxyError):
    """Secret missing or too short, or another setting unusable."""

    status_code = 500


class ValidationError(ProxyError):
    """Malformed or missing request parameters (400, or 401 for a missing signature)."""

    status_code = 400


class AuthError(ProxyError):
    """Bad signature or disallowed source origin."""

    status_code = 403


class UpstreamError(ProxyError):
    """Source fetch failed or returned a non-success status."""

    status_code = 502


class EncodeError(ProxyError):
    """Source could not be decoded or re-encoded."""

    status_code = 500
