from __future__ import annotations

import io

from PIL import Image, ImageOps, UnidentifiedImageError


class InvalidImageError(ValueError):
    """Raised when uploaded or downloaded bytes are not a readable image."""


def open_image(data: bytes) -> Image.Image:
    if not data:
        raise InvalidImageError("No image data received")
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise InvalidImageError(f"Unreadable image: {exc}") from exc
    return img


def normalize_image(img: Image.Image, max_side: int = 0) -> Image.Image:
    """Upright RGB copy of ``img``, shrunk so its longer side fits ``max_side``."""
    upright = ImageOps.exif_transpose(img)
    if upright.mode != "RGB":
        if "A" in upright.getbands() or upright.mode == "P":
            # Flatten transparency onto white rather than black.
            rgba = upright.convert("RGBA")
            canvas = Image.new("RGB", rgba.size, (255, 255, 255))
            canvas.paste(rgba, mask=rgba.getchannel("A"))
            upright = canvas
        else:
            upright = upright.convert("RGB")
    elif upright is img:
        upright = img.copy()

    if max_side and max(upright.size) > max_side:
        upright.thumbnail((max_side, max_side), Image.Resampling.LANCZOS)
    return upright


def encode_image(img: Image.Image, fmt: str = "PNG", quality: int = 92) -> bytes:
    buffer = io.BytesIO()
    fmt = fmt.upper()
    if fmt in ("JPG", "JPEG"):
        img.convert("RGB").save(buffer, "JPEG", quality=quality)
    elif fmt == "PNG":
        img.save(buffer, "PNG", optimize=True)
    else:
        raise ValueError(f"Unsupported image format: {fmt}")
    return buffer.getvalue()
