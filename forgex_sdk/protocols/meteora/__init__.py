from .adapter import MeteoraAdapter

__all__ = ["MeteoraAdapter"]
