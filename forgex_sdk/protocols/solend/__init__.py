from .adapter import SolendAdapter

__all__ = ["SolendAdapter"]
