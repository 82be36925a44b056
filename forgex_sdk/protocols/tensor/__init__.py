"""
Tensor NFT marketplace adapter
"""

from .adapter import TensorAdapter

__all__ = [
    "TensorAdapter",
]
