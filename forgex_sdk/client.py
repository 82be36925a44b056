"""
ForgeXClient - Unified entry point for Solana provider APIs

Holds one adapter slot per provider, the shared HTTP transport and the RPC
connection handle, and runs the cross-provider operations (portfolio,
market overview, health check) on top of them.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional, TYPE_CHECKING

from .binding import (
    KEYPAIR_REQUIRED,
    WALLET_NOT_BOUND,
    AdapterSlot,
    AdapterTable,
    BindingState,
    BindingStatus,
)
from .errors import ConfigurationError, InvalidWalletState
from .infra.http import HttpTransport
from .infra.rpc import RpcClient
from .infra.signer import wallet_public_key
from .protocols.registry import CredentialRule, ProtocolRegistry, ProviderSpec, WalletRequirement
from .types.common import ConnectionConfig, Credentials, Network
from .types.results import HealthReport, MarketOverview, PortfolioSnapshot

if TYPE_CHECKING:
    from .modules import HealthModule, MarketModule, PortfolioModule, WalletModule
    from .protocols.birdeye import BirdeyeAdapter
    from .protocols.clockwork import ClockworkAdapter
    from .protocols.crossmint import CrossmintAdapter
    from .protocols.dexscreener import DexScreenerAdapter
    from .protocols.dialect import DialectAdapter
    from .protocols.drift import DriftAdapter
    from .protocols.helius import HeliusAdapter
    from .protocols.jupiter import JupiterAdapter
    from .protocols.kamino import KaminoAdapter
    from .protocols.marginfi import MarginfiAdapter
    from .protocols.marinade import MarinadeAdapter
    from .protocols.mayan import MayanAdapter
    from .protocols.meteora import MeteoraAdapter
    from .protocols.pyth import PythAdapter
    from .protocols.raydium import RaydiumAdapter
    from .protocols.sanctum import SanctumAdapter
    from .protocols.shyft import ShyftAdapter
    from .protocols.solend import SolendAdapter
    from .protocols.squads import SquadsAdapter
    from .protocols.tensor import TensorAdapter

logger = logging.getLogger(__name__)

PRESENT = "present"


class ForgeXClient:
    """
    Unified Solana provider client

    Adapters are exposed as properties returning the adapter, or None when
    the provider is absent (missing API key, no wallet bound, keypair-only).
    Construction performs no network I/O.

    Usage:
        client = ForgeXClient.mainnet(Credentials(tensor="..."))

        # Individual providers
        price = await client.pyth.get_price("SOL")
        if client.tensor:
            collections = await client.tensor.get_collections()

        # Cross-provider operations (never raise)
        portfolio = await client.get_portfolio("Wallet...")
        overview = await client.get_market_overview()
        report = await client.health_check()

        # Wallet binding
        client.bind(wallet)
        quote = await client.mayan.get_quote(params)
        client.unbind()

        await client.aclose()
    """

    def __init__(
        self,
        connection: Optional[ConnectionConfig] = None,
        credentials: Optional[Credentials] = None,
        *,
        http: Optional[HttpTransport] = None,
        rpc: Optional[RpcClient] = None,
    ):
        """
        Initialize ForgeXClient

        Args:
            connection: Network / endpoint / commitment (mainnet by default)
            credentials: Provider API keys and optional raw keypair
            http: Shared HTTP transport (one is created when omitted)
            rpc: RPC connection handle (one is created when omitted)
        """
        self._connection_config = connection or ConnectionConfig()
        self._credentials = credentials or Credentials()

        self._owns_http = http is None
        self._http = http or HttpTransport()
        self._rpc = rpc or RpcClient(
            self._connection_config.resolve_endpoint(),
            self._http,
            commitment=self._connection_config.commitment,
        )

        self._slots = AdapterTable()
        self._binding_lock = threading.Lock()
        self._wallet_binding: Any = None

        self._slots.set_many(self._build_slot(spec) for spec in ProtocolRegistry.specs())

        # Lazy-loaded modules
        self._wallet: Optional["WalletModule"] = None
        self._portfolio: Optional["PortfolioModule"] = None
        self._market: Optional["MarketModule"] = None
        self._health: Optional["HealthModule"] = None

        present = [slot.name for slot in self._slots if slot.is_present]
        logger.info(
            f"ForgeXClient on {self.network.value} ({self.endpoint}): "
            f"{len(present)}/{len(self._slots)} providers present"
        )

    # ==================== Factories ====================

    @classmethod
    def mainnet(cls, credentials: Optional[Credentials] = None, **kwargs) -> "ForgeXClient":
        return cls(ConnectionConfig(network=Network.MAINNET), credentials, **kwargs)

    @classmethod
    def devnet(cls, credentials: Optional[Credentials] = None, **kwargs) -> "ForgeXClient":
        return cls(ConnectionConfig(network=Network.DEVNET), credentials, **kwargs)

    @classmethod
    def custom(
        cls,
        endpoint: str,
        credentials: Optional[Credentials] = None,
        network: Network = Network.MAINNET,
        **kwargs,
    ) -> "ForgeXClient":
        """Client on an explicit RPC endpoint; network still selects provider environments"""
        if not endpoint:
            raise ConfigurationError.missing("endpoint")
        return cls(ConnectionConfig(network=network, endpoint=endpoint), credentials, **kwargs)

    # ==================== Slot construction ====================

    def _build_slot(self, spec: ProviderSpec, public_key: Optional[str] = None) -> AdapterSlot:
        api_key = self._credentials.get(spec.name)
        if spec.credential is CredentialRule.REQUIRED and not api_key:
            return AdapterSlot.absent(spec.name, f"missing {spec.name} API key")

        kwargs: Dict[str, Any] = {
            "api_key": api_key,
            "rpc": self._rpc,
            "network": self.network,
        }
        if spec.wallet is WalletRequirement.PUBLIC_KEY:
            if public_key is None:
                return AdapterSlot.absent(spec.name, WALLET_NOT_BOUND)
            kwargs["wallet"] = public_key
        elif spec.wallet is WalletRequirement.KEYPAIR:
            if self._credentials.keypair is None:
                return AdapterSlot.absent(spec.name, KEYPAIR_REQUIRED)
            kwargs["keypair"] = self._credentials.keypair

        adapter_class = ProtocolRegistry.adapter_class(spec.name)
        try:
            adapter = adapter_class(self._http, **kwargs)
        except ConfigurationError as e:
            logger.warning(f"Provider {spec.name} not constructed: {e.message}")
            return AdapterSlot.absent(spec.name, e.message)
        return AdapterSlot.present(spec.name, adapter)

    # ==================== Slot access ====================

    def slot(self, name: str) -> AdapterSlot:
        """Slot of provider; unknown names yield Absent("unknown provider")"""
        return self._slots.get(name.lower())

    def slots(self) -> Dict[str, AdapterSlot]:
        """Consistent copy of every slot"""
        return self._slots.snapshot()

    def require(self, name: str):
        """
        Adapter of provider

        Raises:
            AdapterUnavailable: provider is absent, with the reason
        """
        return self.slot(name).unwrap()

    def status(self) -> Dict[str, str]:
        """provider -> "present" or the reason it is absent"""
        return {
            name: PRESENT if slot.is_present else slot.reason
            for name, slot in self._slots.snapshot().items()
        }

    def _adapter(self, name: str):
        return self._slots.get(name).adapter

    # ==================== Wallet binding ====================

    def bind(self, wallet) -> BindingStatus:
        """
        Bind a wallet

        Rebuilds every provider that needs the wallet's public key. Providers
        that need a raw keypair are credential-scoped: a wallet never exposes
        its secret key, so bind() leaves them as construction left them and
        reports the absent ones in BindingStatus.unavailable. Re-binding
        replaces the previous wallet.

        Raises:
            InvalidWalletState: wallet is None or has no public key
        """
        public_key = wallet_public_key(wallet)
        if public_key is None:
            raise InvalidWalletState.no_public_key()

        with self._binding_lock:
            self._slots.set_many(
                self._build_slot(spec, public_key) for spec in ProtocolRegistry.wallet_dependent()
            )
            self._wallet_binding = wallet

        logger.info(f"Bound wallet {public_key}")
        return self.binding_status()

    def unbind(self) -> BindingStatus:
        """Clear every provider built from the bound wallet. Idempotent."""
        with self._binding_lock:
            self._slots.set_many(
                AdapterSlot.absent(spec.name, WALLET_NOT_BOUND)
                for spec in ProtocolRegistry.wallet_dependent()
            )
            was_bound = self._wallet_binding is not None
            self._wallet_binding = None

        if was_bound:
            logger.info("Wallet unbound")
        return self.binding_status()

    def binding_status(self) -> BindingStatus:
        with self._binding_lock:
            wallet = self._wallet_binding
            slots = self._slots.snapshot()

        bound = []
        unavailable = {}
        for spec in ProtocolRegistry.wallet_dependent():
            slot = slots[spec.name]
            if slot.is_present:
                bound.append(spec.name)
            else:
                unavailable[spec.name] = slot.reason
        for spec in ProtocolRegistry.keypair_scoped():
            slot = slots[spec.name]
            if not slot.is_present:
                unavailable[spec.name] = slot.reason

        return BindingStatus(
            state=BindingState.BOUND if wallet is not None else BindingState.UNBOUND,
            public_key=wallet_public_key(wallet),
            bound=tuple(bound),
            unavailable=unavailable,
        )

    @property
    def bound_wallet(self):
        """Currently bound wallet, or None"""
        return self._wallet_binding

    # ==================== Connection ====================

    @property
    def connection(self) -> RpcClient:
        """Solana RPC connection handle"""
        return self._rpc

    @property
    def http(self) -> HttpTransport:
        return self._http

    @property
    def endpoint(self) -> str:
        return self._rpc.endpoint

    @property
    def network(self) -> Network:
        return self._connection_config.network

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    # ==================== Modules ====================

    @property
    def wallet(self) -> "WalletModule":
        """
        Wallet module

        Provides:
        - generate_wallet() / import_wallet(secret)
        - get_wallet_info(address), get_transaction_history(address)
        - request_airdrop(address, sol): devnet / testnet only
        - send_transaction(tx), send_sol(to, amount): need a bound wallet
        """
        if self._wallet is None:
            from .modules.wallet import WalletModule
            self._wallet = WalletModule(self)
        return self._wallet

    @property
    def portfolio(self) -> "PortfolioModule":
        if self._portfolio is None:
            from .modules.portfolio import PortfolioModule
            self._portfolio = PortfolioModule(self)
        return self._portfolio

    @property
    def market(self) -> "MarketModule":
        if self._market is None:
            from .modules.market import MarketModule
            self._market = MarketModule(self)
        return self._market

    @property
    def health(self) -> "HealthModule":
        if self._health is None:
            from .modules.health import HealthModule
            self._health = HealthModule(self)
        return self._health

    # ==================== Cross-provider operations ====================

    async def get_portfolio(self, address: str) -> PortfolioSnapshot:
        """SOL balance, holdings, lending, staking and perps of address. Never raises."""
        return await self.portfolio.get_portfolio(address)

    async def get_market_overview(self) -> MarketOverview:
        """Prices, slot, staking, NFTs and SOL pairs. Never raises."""
        return await self.market.get_market_overview()

    async def health_check(self) -> HealthReport:
        """Probe the connection and present adapters. Never raises."""
        return await self.health.health_check()

    # ==================== Providers ====================

    @property
    def jupiter(self) -> Optional["JupiterAdapter"]:
        return self._adapter("jupiter")

    @property
    def kamino(self) -> Optional["KaminoAdapter"]:
        return self._adapter("kamino")

    @property
    def tensor(self) -> Optional["TensorAdapter"]:
        return self._adapter("tensor")

    @property
    def marinade(self) -> Optional["MarinadeAdapter"]:
        return self._adapter("marinade")

    @property
    def drift(self) -> Optional["DriftAdapter"]:
        return self._adapter("drift")

    @property
    def pyth(self) -> Optional["PythAdapter"]:
        return self._adapter("pyth")

    @property
    def squads(self) -> Optional["SquadsAdapter"]:
        return self._adapter("squads")

    @property
    def raydium(self) -> Optional["RaydiumAdapter"]:
        return self._adapter("raydium")

    @property
    def mayan(self) -> Optional["MayanAdapter"]:
        """Present only while a wallet is bound"""
        return self._adapter("mayan")

    @property
    def sanctum(self) -> Optional["SanctumAdapter"]:
        return self._adapter("sanctum")

    @property
    def meteora(self) -> Optional["MeteoraAdapter"]:
        return self._adapter("meteora")

    @property
    def marginfi(self) -> Optional["MarginfiAdapter"]:
        return self._adapter("marginfi")

    @property
    def helius(self) -> Optional["HeliusAdapter"]:
        return self._adapter("helius")

    @property
    def solend(self) -> Optional["SolendAdapter"]:
        return self._adapter("solend")

    @property
    def birdeye(self) -> Optional["BirdeyeAdapter"]:
        return self._adapter("birdeye")

    @property
    def dexscreener(self) -> Optional["DexScreenerAdapter"]:
        return self._adapter("dexscreener")

    @property
    def shyft(self) -> Optional["ShyftAdapter"]:
        return self._adapter("shyft")

    @property
    def crossmint(self) -> Optional["CrossmintAdapter"]:
        return self._adapter("crossmint")

    @property
    def dialect(self) -> Optional["DialectAdapter"]:
        """Present only when credentials carry a raw keypair"""
        return self._adapter("dialect")

    @property
    def clockwork(self) -> Optional["ClockworkAdapter"]:
        """Present only when credentials carry a raw keypair"""
        return self._adapter("clockwork")

    # ==================== Lifecycle ====================

    async def aclose(self):
        """Close the shared HTTP transport (when the client created it)"""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def __repr__(self) -> str:
        return f"ForgeXClient(network={self.network.value!r}, endpoint={self.endpoint!r})"
