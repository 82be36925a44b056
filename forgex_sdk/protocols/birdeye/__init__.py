from .adapter import BirdeyeAdapter

__all__ = ["BirdeyeAdapter"]
