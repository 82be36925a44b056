from .adapter import RaydiumAdapter

__all__ = ["RaydiumAdapter"]
