from .favicon_codec import PillowImage, PillowImageCodec

__all__ = ["PillowImage", "PillowImageCodec"]
