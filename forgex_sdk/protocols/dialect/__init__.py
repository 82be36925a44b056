from .adapter import DialectAdapter, create_auth_token

__all__ = ["DialectAdapter", "create_auth_token"]
