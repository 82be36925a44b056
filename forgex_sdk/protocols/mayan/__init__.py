from .adapter import GAS_DROP_LIMITS, MayanAdapter

__all__ = ["MayanAdapter", "GAS_DROP_LIMITS"]
