"""Port for decoding, resizing and re-encoding favicon images."""

from __future__ import annotations

from typing import Protocol


class ImagePort(Protocol):
    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def resize(self, width: int, height: int) -> ImagePort: ...

    def to_data_url(self) -> str:
        """Encode in the source format as a ``data:`` URL."""
        ...


class ImageCodecPort(Protocol):
    def decode(self, data: bytes) -> ImagePort:
        """Decode image bytes. Raises ``ImageDecodeError``."""
        ...
