from .adapter import SquadsAdapter

__all__ = ["SquadsAdapter"]
