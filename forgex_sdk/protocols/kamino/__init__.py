"""
Kamino lending adapter
"""

from .adapter import KaminoAdapter, LendingAction, LendingParams

__all__ = [
    "KaminoAdapter",
    "LendingAction",
    "LendingParams",
]
