"""
Clockwork Adapter

Automation threads owned by the keypair's authority. Thread accounts are
read over RPC; pause / resume / delete are built as Anchor instructions and
signed with the keypair.
"""

import base64
import hashlib
import logging
import struct
from typing import Any, Dict, List, Optional, Sequence

from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.transaction import VersionedTransaction

from ...errors import ConfigurationError
from ..base import ProviderAdapter, upstream_call

logger = logging.getLogger(__name__)

THREAD_PROGRAM_ID = "CLoCKyJ6DXBJqqu2VWx9RLbgnwwR6BMHHuyasVmfMzBh"

THREAD_SEED = b"thread"

# Anchor account discriminator (8) followed by the authority pubkey
AUTHORITY_OFFSET = 8


def _discriminator(name: str) -> bytes:
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


def decode_thread(address: str, account: Dict[str, Any]) -> Dict[str, Any]:
    """Decode the fixed header of a thread account"""
    raw = base64.b64decode(account["data"][0])
    authority = Pubkey.from_bytes(raw[AUTHORITY_OFFSET:AUTHORITY_OFFSET + 32])
    bump = raw[AUTHORITY_OFFSET + 32]
    slot, epoch, unix_timestamp = struct.unpack_from("<QQq", raw, AUTHORITY_OFFSET + 33)
    return {
        "address": address,
        "authority": str(authority),
        "bump": bump,
        "created_at": {"slot": slot, "epoch": epoch, "unix_timestamp": unix_timestamp},
        "lamports": int(account.get("lamports", 0)),
        "data_len": len(raw),
    }


class ClockworkAdapter(ProviderAdapter):
    """
    Clockwork thread adapter (raw keypair required)

    Usage:
        threads = await client.clockwork.list_threads()
        signature = await client.clockwork.pause_thread(threads[0]["address"])
    """

    name = "clockwork"

    def __init__(self, http, *, keypair: Keypair, **kwargs):
        if keypair is None:
            raise ConfigurationError.missing("clockwork keypair")
        super().__init__(http, **kwargs)
        self._keypair = keypair

    @property
    def authority(self) -> Pubkey:
        return self._keypair.pubkey()

    def thread_address(self, thread_id: str, authority: Optional[str] = None) -> str:
        """Thread PDA for (authority, id)"""
        owner = Pubkey.from_string(authority) if authority else self.authority
        address, _ = Pubkey.find_program_address(
            [THREAD_SEED, bytes(owner), thread_id.encode()],
            Pubkey.from_string(THREAD_PROGRAM_ID),
        )
        return str(address)

    @upstream_call("get_thread")
    async def get_thread(self, address: str) -> Optional[Dict[str, Any]]:
        account = await self._require_rpc().get_account_info(address, encoding="base64")
        if account is None:
            return None
        if account.get("owner") != THREAD_PROGRAM_ID:
            raise ConfigurationError.invalid("address", f"{address} is not a thread account")
        return decode_thread(address, account)

    @upstream_call("list_threads")
    async def list_threads(self, authority: Optional[str] = None) -> List[Dict[str, Any]]:
        """Threads owned by authority (defaults to the keypair)"""
        owner = authority or str(self.authority)
        accounts = await self._require_rpc().get_program_accounts(
            THREAD_PROGRAM_ID,
            filters=[{"memcmp": {"offset": AUTHORITY_OFFSET, "bytes": owner}}],
        )
        return [decode_thread(item["pubkey"], item["account"]) for item in accounts]

    # ==================== Thread management ====================

    def _thread_instruction(self, name: str, thread: str, extra: Sequence[AccountMeta] = ()) -> Instruction:
        accounts = [
            AccountMeta(self.authority, is_signer=True, is_writable=True),
            *extra,
            AccountMeta(Pubkey.from_string(thread), is_signer=False, is_writable=True),
        ]
        return Instruction(Pubkey.from_string(THREAD_PROGRAM_ID), _discriminator(name), accounts)

    def build_pause_instruction(self, thread: str) -> Instruction:
        return self._thread_instruction("thread_pause", thread)

    def build_resume_instruction(self, thread: str) -> Instruction:
        return self._thread_instruction("thread_resume", thread)

    def build_delete_instruction(self, thread: str, close_to: Optional[str] = None) -> Instruction:
        """Delete thread, returning its rent to close_to (defaults to the authority)"""
        close_to_key = Pubkey.from_string(close_to) if close_to else self.authority
        return self._thread_instruction(
            "thread_delete",
            thread,
            extra=[AccountMeta(close_to_key, is_signer=False, is_writable=True)],
        )

    async def _submit(self, instruction: Instruction) -> str:
        rpc = self._require_rpc()
        blockhash = await rpc.get_latest_blockhash()
        message = MessageV0.try_compile(
            self.authority,
            [instruction],
            [],
            Hash.from_string(blockhash["blockhash"]),
        )
        tx = VersionedTransaction(message, [self._keypair])
        signature = await rpc.send_raw_transaction(base64.b64encode(bytes(tx)).decode("ascii"))
        logger.info(f"clockwork: submitted {signature}")
        return signature

    @upstream_call("pause_thread")
    async def pause_thread(self, thread: str) -> str:
        return await self._submit(self.build_pause_instruction(thread))

    @upstream_call("resume_thread")
    async def resume_thread(self, thread: str) -> str:
        return await self._submit(self.build_resume_instruction(thread))

    @upstream_call("delete_thread")
    async def delete_thread(self, thread: str, close_to: Optional[str] = None) -> str:
        return await self._submit(self.build_delete_instruction(thread, close_to))

