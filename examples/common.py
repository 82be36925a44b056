"""
Shared setup for the example scripts

Reads SOLANA_NETWORK / SOLANA_RPC_URL / SOLANA_COMMITMENT and the provider
API keys from the environment (or .env) and builds a client from them.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from forgex_sdk import Commitment, ConnectionConfig, Credentials, ForgeXClient, Network
from forgex_sdk.config import get_config


def create_client() -> ForgeXClient:
    cfg = get_config()
    connection = ConnectionConfig(
        network=Network.from_string(cfg.rpc.network),
        endpoint=cfg.rpc.url or None,
        commitment=Commitment(cfg.rpc.commitment),
    )
    return ForgeXClient(connection, Credentials.from_env())


def banner(title: str):
    print("=" * 60)
    print(title)
    print("=" * 60)


def section(title: str):
    print("\n" + "-" * 60)
    print(title)
    print("-" * 60)
