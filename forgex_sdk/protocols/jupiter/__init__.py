"""
Jupiter swap aggregator adapter
"""

from .adapter import JupiterAdapter, QuoteParams

__all__ = [
    "JupiterAdapter",
    "QuoteParams",
]
