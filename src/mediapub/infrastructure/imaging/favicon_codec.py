"""Pillow-backed image codec for favicon normalization."""

from __future__ import annotations

import base64
from io import BytesIO

import structlog
from PIL import Image, UnidentifiedImageError

from mediapub.domain.entities.errors import ImageDecodeError

log = structlog.get_logger(__name__)

# Formats Pillow can read but not write fall back to PNG
_FALLBACK_FORMAT = "PNG"


class PillowImage:
    """Decoded image that re-encodes in its source format."""

    def __init__(self, image: Image.Image, fmt: str) -> None:
        self._image = image
        self._format = fmt

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def format(self) -> str:
        return self._format

    def resize(self, width: int, height: int) -> PillowImage:
        return PillowImage(self._image.resize((width, height)), self._format)

    def to_data_url(self) -> str:
        Image.init()
        fmt = self._format if self._format in Image.SAVE else _FALLBACK_FORMAT
        image = self._image
        if fmt == "JPEG" and image.mode in {"RGBA", "P", "LA"}:
            image = image.convert("RGB")

        buffer = BytesIO()
        try:
            image.save(buffer, format=fmt)
        except (OSError, ValueError) as exc:
            raise ImageDecodeError(f"cannot encode image as {fmt}: {exc}") from exc

        mime = Image.MIME.get(fmt, "image/png")
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:{mime};base64,{encoded}"


class PillowImageCodec:
    """Decodes favicon bytes with Pillow."""

    def decode(self, data: bytes) -> PillowImage:
        try:
            with Image.open(BytesIO(data)) as source:
                fmt = (source.format or _FALLBACK_FORMAT).upper()
                source.load()
                image = source.copy()
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise ImageDecodeError(f"cannot decode image: {exc}") from exc

        log.debug("image_decoded", format=fmt, width=image.width, height=image.height)
        return PillowImage(image, fmt)
