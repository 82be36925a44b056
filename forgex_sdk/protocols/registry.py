"""
Provider registry

Describes every provider the facade knows about: where its adapter lives,
which credential it needs and what it needs from a wallet. Adapter modules
are imported lazily on first use.
"""

import importlib
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple, Type, TYPE_CHECKING

from ..errors import ConfigurationError

if TYPE_CHECKING:
    from .base import ProviderAdapter

logger = logging.getLogger(__name__)


class CredentialRule(Enum):
    NONE = "none"
    OPTIONAL = "optional"
    REQUIRED = "required"


class WalletRequirement(Enum):
    """
    What a provider needs from the wallet

    NONE: works without a wallet
    PUBLIC_KEY: built by bind() from the wallet's public key
    KEYPAIR: needs a raw private key; credential-scoped, built only from
        Credentials.keypair and untouched by bind() / unbind()
    """
    NONE = "none"
    PUBLIC_KEY = "public_key"
    KEYPAIR = "keypair"

    @property
    def is_wallet_dependent(self) -> bool:
        return self is WalletRequirement.PUBLIC_KEY


@dataclass(frozen=True)
class ProviderSpec:
    """
    Static description of one provider

    Attributes:
        name: Provider name, also the facade accessor and credential field
        module: Module path holding the adapter class
        class_name: Adapter class name
        credential: Whether an API key is needed
        wallet: Wallet requirement
    """
    name: str
    module: str
    class_name: str
    credential: CredentialRule = CredentialRule.NONE
    wallet: WalletRequirement = WalletRequirement.NONE
    description: str = ""


def _spec(name, class_name, credential=CredentialRule.NONE, wallet=WalletRequirement.NONE, description=""):
    return ProviderSpec(
        name=name,
        module=f"{__package__}.{name}",
        class_name=class_name,
        credential=credential,
        wallet=wallet,
        description=description,
    )


PROVIDERS: Tuple[ProviderSpec, ...] = (
    _spec("jupiter", "JupiterAdapter", CredentialRule.OPTIONAL, description="Swap aggregator"),
    _spec("kamino", "KaminoAdapter", description="Lending"),
    _spec("tensor", "TensorAdapter", CredentialRule.REQUIRED, description="NFT marketplace"),
    _spec("marinade", "MarinadeAdapter", description="Liquid staking"),
    _spec("drift", "DriftAdapter", description="Perpetuals"),
    _spec("pyth", "PythAdapter", description="Price oracle"),
    _spec("squads", "SquadsAdapter", CredentialRule.OPTIONAL, description="Multisig"),
    _spec("raydium", "RaydiumAdapter", description="AMM"),
    _spec("mayan", "MayanAdapter", wallet=WalletRequirement.PUBLIC_KEY, description="Cross-chain swaps"),
    _spec("sanctum", "SanctumAdapter", CredentialRule.OPTIONAL, description="LST yields"),
    _spec("meteora", "MeteoraAdapter", CredentialRule.OPTIONAL, description="Dynamic vaults"),
    _spec("marginfi", "MarginfiAdapter", CredentialRule.OPTIONAL, description="Lending"),
    _spec("helius", "HeliusAdapter", CredentialRule.REQUIRED, description="Enhanced APIs"),
    _spec("solend", "SolendAdapter", description="Lending"),
    _spec("birdeye", "BirdeyeAdapter", CredentialRule.REQUIRED, description="Market data"),
    _spec("dexscreener", "DexScreenerAdapter", description="DEX pair analytics"),
    _spec("shyft", "ShyftAdapter", CredentialRule.REQUIRED, description="Wallet data"),
    _spec("crossmint", "CrossmintAdapter", CredentialRule.REQUIRED, description="Custodial wallets"),
    _spec("dialect", "DialectAdapter", wallet=WalletRequirement.KEYPAIR, description="Wallet messaging"),
    _spec("clockwork", "ClockworkAdapter", wallet=WalletRequirement.KEYPAIR,
          description="Automation threads"),
)


class ProtocolRegistry:
    """
    Registry for provider adapters

    Usage:
        spec = ProtocolRegistry.spec("pyth")
        adapter_class = ProtocolRegistry.adapter_class("pyth")

        # Swap in a custom adapter class
        ProtocolRegistry.register("pyth", MyPythAdapter)
    """

    _specs: Dict[str, ProviderSpec] = {spec.name: spec for spec in PROVIDERS}

    # Resolved adapter classes
    _adapters: Dict[str, Type["ProviderAdapter"]] = {}

    @classmethod
    def register(cls, name: str, adapter_class: Type["ProviderAdapter"]):
        """Register (or override) the adapter class of a known provider"""
        name_lower = name.lower()
        if name_lower not in cls._specs:
            raise ConfigurationError.invalid("provider", f"Unknown provider: {name}")
        cls._adapters[name_lower] = adapter_class
        logger.debug(f"Registered provider adapter: {name}")

    @classmethod
    def spec(cls, name: str) -> ProviderSpec:
        name_lower = name.lower()
        if name_lower not in cls._specs:
            available = ", ".join(cls._specs)
            raise ConfigurationError.invalid(
                "provider", f"Unknown provider: {name}. Available providers: {available}"
            )
        return cls._specs[name_lower]

    @classmethod
    def specs(cls) -> List[ProviderSpec]:
        return list(cls._specs.values())

    @classmethod
    def adapter_class(cls, name: str) -> Type["ProviderAdapter"]:
        """Adapter class for provider, importing its module on first use"""
        spec = cls.spec(name)
        if spec.name not in cls._adapters:
            module = importlib.import_module(spec.module)
            cls._adapters[spec.name] = getattr(module, spec.class_name)
        return cls._adapters[spec.name]

    @classmethod
    def list(cls) -> List[str]:
        return list(cls._specs)

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name.lower() in cls._specs

    @classmethod
    def wallet_dependent(cls) -> List[ProviderSpec]:
        """Providers bind() builds from the wallet public key and unbind() clears"""
        return [spec for spec in cls._specs.values() if spec.wallet.is_wallet_dependent]

    @classmethod
    def keypair_scoped(cls) -> List[ProviderSpec]:
        """Providers built only from Credentials.keypair"""
        return [spec for spec in cls._specs.values() if spec.wallet is WalletRequirement.KEYPAIR]

    @classmethod
    def clear_cache(cls):
        """Forget resolved and overridden adapter classes"""
        cls._adapters.clear()


def get_provider_spec(name: str) -> Optional[ProviderSpec]:
    """Spec for provider, or None when unknown"""
    if not ProtocolRegistry.is_registered(name):
        return None
    return ProtocolRegistry.spec(name)


def register_adapter(name: str, adapter_class: Type["ProviderAdapter"]):
    """Convenience function to register adapter"""
    ProtocolRegistry.register(name, adapter_class)
