"""
Error definitions for ForgeX SDK
"""

from .exceptions import (
    ErrorCode,
    ForgeXError,
    UpstreamError,
    RpcError,
    ConfigurationError,
    InvalidWalletState,
    AdapterUnavailable,
)

__all__ = [
    "ErrorCode",
    "ForgeXError",
    "UpstreamError",
    "RpcError",
    "ConfigurationError",
    "InvalidWalletState",
    "AdapterUnavailable",
]
