from .adapter import PYTH_FEEDS, PythAdapter

__all__ = ["PythAdapter", "PYTH_FEEDS"]
