"""
Common type definitions
"""

from dataclasses import dataclass, field, fields
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional, Union

if TYPE_CHECKING:
    from solders.keypair import Keypair

LAMPORTS_PER_SOL = 1_000_000_000


class Network(Enum):
    """Solana cluster selector"""
    MAINNET = "mainnet-beta"
    DEVNET = "devnet"
    TESTNET = "testnet"

    @classmethod
    def from_string(cls, value: str) -> "Network":
        """Convert string to Network (case-insensitive, accepts 'mainnet')"""
        value_lower = value.lower().strip()
        if value_lower in ("mainnet", "mainnet-beta"):
            return cls.MAINNET
        elif value_lower == "devnet":
            return cls.DEVNET
        elif value_lower == "testnet":
            return cls.TESTNET
        from ..errors import ConfigurationError
        raise ConfigurationError.invalid(
            "network", f"Unknown network: {value}. Supported: mainnet-beta, devnet, testnet"
        )

    @property
    def default_endpoint(self) -> str:
        return DEFAULT_ENDPOINTS[self]


DEFAULT_ENDPOINTS: Dict[Network, str] = {
    Network.MAINNET: "https://api.mainnet-beta.solana.com",
    Network.DEVNET: "https://api.devnet.solana.com",
    Network.TESTNET: "https://api.testnet.solana.com",
}


class Commitment(Enum):
    """Solana commitment level"""
    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Connection descriptor

    Attributes:
        network: Cluster selector, maps to a default endpoint
        endpoint: Explicit RPC URL, always wins over the network default
        commitment: Default commitment for RPC reads
    """
    network: Network = Network.MAINNET
    endpoint: Optional[str] = None
    commitment: Commitment = Commitment.CONFIRMED

    def resolve_endpoint(self) -> str:
        return self.endpoint or self.network.default_endpoint


@dataclass(frozen=True)
class Credentials:
    """
    Credential set supplied once at client construction

    One optional API key per keyed provider, plus an optional raw keypair
    for providers that can only work with a private key.
    """
    jupiter: Optional[str] = None
    tensor: Optional[str] = None
    helius: Optional[str] = None
    birdeye: Optional[str] = None
    shyft: Optional[str] = None
    crossmint: Optional[str] = None
    squads: Optional[str] = None
    meteora: Optional[str] = None
    sanctum: Optional[str] = None
    marginfi: Optional[str] = None
    keypair: Optional["Keypair"] = field(default=None, repr=False)

    def get(self, provider: str) -> Optional[str]:
        """API key for provider, or None"""
        if provider == "keypair":
            return None
        return getattr(self, provider, None)

    def configured(self) -> Dict[str, bool]:
        return {f.name: getattr(self, f.name) is not None for f in fields(self)}

    @classmethod
    def from_env(cls) -> "Credentials":
        """
        Build credentials from environment variables

        Intended for scripts. Reads the *_API_KEY variables and, when set,
        SOLANA_PRIVATE_KEY or SOLANA_KEYPAIR_PATH.
        """
        from ..config import get_config
        from ..infra.signer import load_keypair

        cfg = get_config()
        keypair = None
        if cfg.signer.private_key:
            keypair = load_keypair(cfg.signer.private_key)
        elif cfg.signer.keypair_path:
            keypair = load_keypair(path=cfg.signer.keypair_path)
        return cls(keypair=keypair, **cfg.api_keys.as_dict())


@dataclass(frozen=True)
class Token:
    """
    Token information

    Attributes:
        mint: Token mint address (base58)
        symbol: Token symbol (e.g., "SOL", "USDC")
        decimals: Number of decimal places
        name: Full token name (optional)
    """
    mint: str
    symbol: str
    decimals: int
    name: str = ""

    def __str__(self) -> str:
        return self.symbol

    def __repr__(self) -> str:
        return f"Token({self.symbol}, {self.mint[:8]}...)"

    def ui_amount(self, raw_amount: int) -> Decimal:
        """Convert raw amount (smallest units) to UI amount"""
        return Decimal(raw_amount) / Decimal(10 ** self.decimals)

    def raw_amount(self, ui_amount: Union[Decimal, float, int, str]) -> int:
        """Convert UI amount to raw amount (smallest units)"""
        if not isinstance(ui_amount, Decimal):
            ui_amount = Decimal(str(ui_amount))
        return int(ui_amount * Decimal(10 ** self.decimals))


TOKENS: Dict[str, Token] = {
    "SOL": Token("So11111111111111111111111111111111111111112", "SOL", 9, "Wrapped SOL"),
    "USDC": Token("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v", "USDC", 6, "USD Coin"),
    "USDT": Token("Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB", "USDT", 6, "Tether USD"),
    "RAY": Token("4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R", "RAY", 6, "Raydium"),
    "BONK": Token("DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263", "BONK", 5, "Bonk"),
    "mSOL": Token("mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So", "mSOL", 9, "Marinade staked SOL"),
    "jitoSOL": Token("J1toso1uCk3RLmjorhTtrVwY9HJ7X8V9yYac6Y7kGCPn", "jitoSOL", 9, "Jito Staked SOL"),
}

SOL_MINT = TOKENS["SOL"].mint


def lamports_to_sol(lamports: Union[int, float]) -> float:
    return lamports / LAMPORTS_PER_SOL


def sol_to_lamports(sol: Union[Decimal, float, int, str]) -> int:
    return TOKENS["SOL"].raw_amount(sol)
