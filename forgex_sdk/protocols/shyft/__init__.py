from .adapter import ShyftAdapter

__all__ = ["ShyftAdapter"]
