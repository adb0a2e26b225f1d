"""Pillow-backed decode/resize/encode of proxied images.

Synchronous and CPU-bound; the request handler runs it in a worker thread.
"""
from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError

from image_proxy.errors import EncodeError
from image_proxy.models import EncodedImage, OutputFormat

logger = logging.getLogger(__name__)

_JPEG_BACKGROUND = (255, 255, 255)


def plan_width(natural_width: int | None, target_width: int) -> int | None:
    """Return the width to resize to, or None to keep the natural size.

    Sources already no wider than the target are never upscaled.
    """

    if natural_width and natural_width <= target_width:
        return None
    return target_width


def encode_image(
    data: bytes,
    fmt: OutputFormat,
    *,
    target_width: int,
    quality: int,
) -> EncodedImage:
    """Re-encode *data* as *fmt*, shrunk to *target_width* when wider.

    Raises EncodeError if the bytes are not a decodable image or the
    encoder fails.
    """

    source = _decode(data)
    natural_width, natural_height = source.size
    out_width = plan_width(natural_width, target_width)
    try:
        frame = _prepare_mode(source, fmt)
        if out_width is not None:
            frame = _shrink_to_width(frame, out_width)
        buffer = io.BytesIO()
        frame.save(buffer, format=fmt.pillow_format, **_save_options(fmt, quality))
    except (OSError, ValueError, KeyError) as exc:
        logger.exception("Image encode to %s failed", fmt.value)
        raise EncodeError(f"Failed to encode image as {fmt.value}") from exc

    return EncodedImage(
        content=buffer.getvalue(),
        format=fmt,
        natural_width=natural_width,
        natural_height=natural_height,
        width=frame.width,
        height=frame.height,
    )


# ------------------------------------------------------------------
# Helper functions
# ------------------------------------------------------------------


def _decode(data: bytes) -> Image.Image:
    """Fully decode the first frame; truncated or corrupt sources raise EncodeError."""

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.copy()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as exc:
        logger.warning("Source is not a decodable image: %s", exc)
        raise EncodeError("Source is not a decodable image") from exc


def _shrink_to_width(img: Image.Image, width: int) -> Image.Image:
    """Resize preserving aspect ratio; never enlarges."""

    if img.width <= width:
        return img
    height = max(1, round(img.height * width / img.width))
    return img.resize((width, height), Image.Resampling.LANCZOS)


def _prepare_mode(img: Image.Image, fmt: OutputFormat) -> Image.Image:
    has_alpha = img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info)
    if fmt is OutputFormat.JPEG:
        if has_alpha:
            rgba = img.convert("RGBA")
            background = Image.new("RGB", rgba.size, _JPEG_BACKGROUND)
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background
        return img.convert("RGB")
    # WebP and AVIF carry alpha
    return img.convert("RGBA" if has_alpha else "RGB")


def _save_options(fmt: OutputFormat, quality: int) -> dict:
    if fmt is OutputFormat.AVIF:
        return {"quality": quality}
    if fmt is OutputFormat.WEBP:
        return {"quality": quality, "method": 4}
    if fmt is OutputFormat.JPEG:
        return {"quality": quality, "optimize": True, "progressive": True}
    raise EncodeError(f"Unsupported format: {fmt}")
