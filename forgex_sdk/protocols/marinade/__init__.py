from .adapter import MarinadeAdapter

__all__ = ["MarinadeAdapter"]
