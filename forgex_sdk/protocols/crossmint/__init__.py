from .adapter import CrossmintAdapter

__all__ = ["CrossmintAdapter"]
