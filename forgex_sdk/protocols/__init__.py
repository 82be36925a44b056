"""
Provider adapters

Each provider lives in its own subpackage and is imported lazily through
ProtocolRegistry, so unused providers cost nothing at import time.
"""

from .base import ProviderAdapter, upstream_call
from .mapping import Field, lookup, remap, remap_many
from .registry import (
    PROVIDERS,
    CredentialRule,
    ProtocolRegistry,
    ProviderSpec,
    WalletRequirement,
    get_provider_spec,
    register_adapter,
)

__all__ = [
    "ProviderAdapter",
    "upstream_call",
    "Field",
    "lookup",
    "remap",
    "remap_many",
    "PROVIDERS",
    "CredentialRule",
    "ProtocolRegistry",
    "ProviderSpec",
    "WalletRequirement",
    "get_provider_spec",
    "register_adapter",
]
