"""
Test wallet and signing helpers
"""

import json

import base58
import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0, to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from conftest import run
from forgex_sdk.errors import ConfigurationError, InvalidWalletState
from forgex_sdk.infra.signer import (
    KeypairWallet,
    WalletAdapter,
    WalletType,
    load_keypair,
    sign_versioned_transaction,
    wallet_can_sign,
    wallet_public_key,
)


def _unsigned_transfer(payer: Pubkey) -> VersionedTransaction:
    instruction = transfer(TransferParams(from_pubkey=payer, to_pubkey=Pubkey.new_unique(), lamports=1000))
    message = MessageV0.try_compile(payer, [instruction], [], Hash.default())
    return VersionedTransaction.populate(message, [Signature.default()])


class TestLoadKeypair:
    def test_from_base58(self):
        keypair = Keypair()
        secret = base58.b58encode(bytes(keypair)).decode()
        assert load_keypair(secret).pubkey() == keypair.pubkey()

    def test_from_json_array(self):
        keypair = Keypair()
        assert load_keypair(json.dumps(list(bytes(keypair)))).pubkey() == keypair.pubkey()

    def test_from_int_list(self):
        keypair = Keypair()
        assert load_keypair(list(bytes(keypair))).pubkey() == keypair.pubkey()

    def test_from_file(self, tmp_path):
        keypair = Keypair()
        path = tmp_path / "id.json"
        path.write_text(json.dumps(list(bytes(keypair))))
        assert load_keypair(path=path).pubkey() == keypair.pubkey()

    def test_missing_and_garbage(self):
        with pytest.raises(ConfigurationError):
            load_keypair()
        with pytest.raises(ConfigurationError):
            load_keypair("not-a-key")


class TestKeypairWallet:
    def test_generate_is_connected(self):
        wallet = KeypairWallet.generate()
        assert wallet.wallet_type == WalletType.GENERATED
        assert wallet.public_key == str(wallet.pubkey)
        assert isinstance(wallet, WalletAdapter)

    def test_disconnected_has_no_public_key(self):
        wallet = KeypairWallet.generate()
        wallet.disconnect()
        assert wallet.public_key is None
        assert wallet_public_key(wallet) is None
        assert wallet.connect() == str(wallet.pubkey)

    def test_secret_round_trip(self):
        wallet = KeypairWallet.generate()
        restored = KeypairWallet.from_secret(wallet.secret_base58())
        assert restored.public_key == wallet.public_key
        assert restored.wallet_type == WalletType.IMPORTED

    def test_sign_transaction(self):
        wallet = KeypairWallet.generate()
        tx = _unsigned_transfer(wallet.pubkey)

        signed = run(wallet.sign_transaction(tx))
        assert signed.signatures[0] != Signature.default()
        message_bytes = to_bytes_versioned(signed.message)
        assert signed.signatures[0].verify(wallet.pubkey, message_bytes)

    def test_sign_while_disconnected_raises(self):
        wallet = KeypairWallet.generate()
        tx = _unsigned_transfer(wallet.pubkey)
        wallet.disconnect()
        with pytest.raises(InvalidWalletState):
            run(wallet.sign_transaction(tx))


def test_sign_rejects_non_signer():
    tx = _unsigned_transfer(Keypair().pubkey())
    with pytest.raises(InvalidWalletState):
        sign_versioned_transaction(Keypair(), tx)


def test_wallet_helpers_on_plain_objects():
    class ReadOnlyWallet:
        public_key = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"

    assert wallet_public_key(ReadOnlyWallet()) == ReadOnlyWallet.public_key
    assert not wallet_can_sign(ReadOnlyWallet())
    assert wallet_can_sign(KeypairWallet.generate())
    assert wallet_public_key(None) is None
