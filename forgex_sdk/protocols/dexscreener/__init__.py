from .adapter import DexScreenerAdapter

__all__ = ["DexScreenerAdapter"]
