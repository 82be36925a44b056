from .adapter import DriftAdapter

__all__ = ["DriftAdapter"]
