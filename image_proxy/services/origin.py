from __future__ import annotations

from urllib.parse import urlsplit

from image_proxy.config import Settings


def is_origin_allowed(source_url: str, settings: Settings) -> bool:
    """Return True if *source_url*'s host is on the allowlist (or no allowlist is set).

    A host matches an entry exactly or as a subdomain of it; ``evilexample.com``
    does not match ``example.com``.
    """

    allowlist = settings.origin_allowlist
    if not allowlist:
        return True
    try:
        host = urlsplit(source_url).hostname
    except ValueError:
        return False
    if not host:
        return False
    host = host.lower()
    return any(host == allowed or host.endswith(f".{allowed}") for allowed in allowlist)
