from .adapter import SanctumAdapter

__all__ = ["SanctumAdapter"]
