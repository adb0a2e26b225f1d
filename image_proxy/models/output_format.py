from __future__ import annotations

from enum import Enum


class OutputFormat(str, Enum):
    """Encodings the proxy can serve, in negotiation priority order."""

    AVIF = "avif"
    WEBP = "webp"
    JPEG = "jpeg"

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]

    @property
    def pillow_format(self) -> str:
        return _PILLOW_FORMATS[self]


_MIME_TYPES: dict[OutputFormat, str] = {
    OutputFormat.AVIF: "image/avif",
    OutputFormat.WEBP: "image/webp",
    OutputFormat.JPEG: "image/jpeg",
}

_PILLOW_FORMATS: dict[OutputFormat, str] = {
    OutputFormat.AVIF: "AVIF",
    OutputFormat.WEBP: "WEBP",
    OutputFormat.JPEG: "JPEG",
}


def select_format(accept: str | None) -> OutputFormat:
    """Pick the output format from an Accept header by plain substring priority.

    q-values are ignored; a client that mentions ``image/avif`` at all gets AVIF.
    """

    accept = (accept or "").lower()
    if "image/avif" in accept:
        return OutputFormat.AVIF
    if "image/webp" in accept:
        return OutputFormat.WEBP
    return OutputFormat.JPEG
