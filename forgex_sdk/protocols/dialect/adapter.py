"""
Dialect Adapter

Wallet-to-wallet messaging threads through the Dialect cloud API.
Requests are authenticated with a short-lived token signed by the raw
keypair (ed25519), so this adapter is only built from a keypair.
"""

import base64
import json
import logging
import time
from typing import Any, Dict, List, Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from ...errors import ConfigurationError, UpstreamError
from ...types.common import Network
from ..base import ProviderAdapter, upstream_call
from ..mapping import Field, remap, remap_many

logger = logging.getLogger(__name__)

DEVELOPMENT_URL = "https://dev.dialectapi.to"

TOKEN_TTL_SECONDS = 3600
TOKEN_REFRESH_MARGIN = 60

MEMBER_SCOPES = ["ADMIN", "WRITE"]

THREAD_FIELDS = (
    Field("id", ("id", "publicKey"), cast=str),
    Field("members", "dialect.members", cast=list, default=[]),
    Field("messages", "dialect.messages", cast=list, default=[]),
    Field("encrypted", "dialect.encrypted", cast=bool, default=False),
    Field("last_message_at", "dialect.lastMessageTimestamp", cast=int),
)

MESSAGE_FIELDS = (
    Field("owner", "owner", cast=str),
    Field("text", "text", cast=str, default=""),
    Field("timestamp", "timestamp", cast=int),
)


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def create_auth_token(keypair: Keypair, ttl_seconds: int = TOKEN_TTL_SECONDS, now: Optional[int] = None) -> str:
    """
    Signed bearer token: b64url(header).b64url(body).b64url(signature)

    The signature covers "header.body" and is made with the keypair, whose
    public key is the token subject.
    """
    issued_at = int(now if now is not None else time.time())
    header = _b64url(json.dumps({"alg": "ed25519", "typ": "JWT"}, separators=(",", ":")).encode())
    body = _b64url(json.dumps({
        "sub": str(keypair.pubkey()),
        "iat": issued_at,
        "exp": issued_at + ttl_seconds,
    }, separators=(",", ":")).encode())
    signing_input = f"{header}.{body}".encode()
    signature = _b64url(bytes(keypair.sign_message(signing_input)))
    return f"{header}.{body}.{signature}"


class DialectAdapter(ProviderAdapter):
    """
    Dialect messaging adapter (raw keypair required)

    Usage:
        thread = await client.dialect.create_thread(recipient)
        await client.dialect.send_message(thread["id"], "gm")
    """

    name = "dialect"
    default_base_url = "https://api.dialect.to"

    def __init__(self, http, *, keypair: Keypair, base_url: Optional[str] = None,
                 network: Network = Network.MAINNET, **kwargs):
        if keypair is None:
            raise ConfigurationError.missing("dialect keypair")
        if base_url is None and network is not Network.MAINNET:
            base_url = DEVELOPMENT_URL
        super().__init__(http, base_url=base_url, network=network, **kwargs)
        self._keypair = keypair
        self._token: Optional[str] = None
        self._token_expires_at = 0

    @property
    def public_key(self) -> str:
        return str(self._keypair.pubkey())

    def _auth_token(self) -> str:
        now = int(time.time())
        if self._token is None or now >= self._token_expires_at - TOKEN_REFRESH_MARGIN:
            self._token = create_auth_token(self._keypair, now=now)
            self._token_expires_at = now + TOKEN_TTL_SECONDS
        return self._token

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._auth_token()}"}

    @upstream_call("get_threads")
    async def get_threads(self) -> List[Dict[str, Any]]:
        return remap_many(await self._get("/api/v1/dialects"), THREAD_FIELDS)

    @upstream_call("get_thread")
    async def get_thread(self, thread_id: str) -> Optional[Dict[str, Any]]:
        try:
            data = await self._get(f"/api/v1/dialects/{thread_id}")
        except UpstreamError as e:
            if e.status_code == 404:
                return None
            raise
        return remap(data, THREAD_FIELDS)

    @upstream_call("create_thread")
    async def create_thread(self, recipient: str, encrypted: bool = False) -> Dict[str, Any]:
        try:
            Pubkey.from_string(recipient)
        except ValueError as e:
            raise ConfigurationError.invalid("recipient", f"not a valid public key: {recipient}") from e
        data = await self._post("/api/v1/dialects", json={
            "encrypted": encrypted,
            "members": [
                {"publicKey": self.public_key, "scopes": MEMBER_SCOPES},
                {"publicKey": recipient, "scopes": MEMBER_SCOPES},
            ],
        })
        return remap(data, THREAD_FIELDS)

    @upstream_call("send_message")
    async def send_message(self, thread_id: str, text: str) -> Dict[str, Any]:
        if not text:
            raise ConfigurationError.invalid("text", "must not be empty")
        data = await self._post(f"/api/v1/dialects/{thread_id}/messages", json={"text": text})
        return remap(data, THREAD_FIELDS)

    @upstream_call("get_messages")
    async def get_messages(self, thread_id: str) -> List[Dict[str, Any]]:
        thread = await self.get_thread(thread_id)
        if thread is None:
            return []
        return remap_many(thread["messages"], MESSAGE_FIELDS)

    @upstream_call("delete_thread")
    async def delete_thread(self, thread_id: str) -> bool:
        await self._delete(f"/api/v1/dialects/{thread_id}", expect_json=False)
        return True

    @upstream_call("get_dapps")
    async def get_dapps(self) -> List[Dict[str, Any]]:
        return await self._get("/api/v1/dapps")
