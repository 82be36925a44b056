from .adapter import HeliusAdapter

__all__ = ["HeliusAdapter"]
