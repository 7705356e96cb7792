"""Screenshot transcoding: compress raw captures to WebP before storage.

A 1024px-wide full-page PNG of a news front page easily reaches several
megabytes; WebP at quality 80 is a fraction of that, and is what the model
receives.
"""

from __future__ import annotations

import io
import logging

from PIL import Image

logger = logging.getLogger(__name__)

MEDIA_TYPE = "image/webp"
EXTENSION = ".webp"


def encode_webp(raw: bytes, quality: int = 80, max_dimension: int = 8000) -> bytes:
    """Transcode a raw screenshot to WebP.

    Images longer than *max_dimension* on either side are scaled down
    proportionally.

    Args:
        raw: Image bytes in any format Pillow can open (PNG from Playwright).
        quality: WebP quality, 1-100.
        max_dimension: Longest permitted side in pixels.

    Returns:
        The WebP-encoded bytes.
    """
    img = Image.open(io.BytesIO(raw))
    img.load()

    w, h = img.size
    longest = max(w, h)
    if longest > max_dimension:
        ratio = max_dimension / longest
        img = img.resize((max(1, int(w * ratio)), max(1, int(h * ratio))), Image.LANCZOS)
        logger.info("Scaled screenshot from %dx%d to %dx%d", w, h, *img.size)

    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGB")

    buf = io.BytesIO()
    img.save(buf, format="WEBP", quality=quality, method=4)
    encoded = buf.getvalue()
    logger.info("Encoded screenshot: %d bytes raw → %d bytes webp", len(raw), len(encoded))
    return encoded
