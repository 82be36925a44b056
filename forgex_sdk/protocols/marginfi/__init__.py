from .adapter import MarginfiAdapter

__all__ = ["MarginfiAdapter"]
