"""Tests for the read-only RPC helpers, served from an in-memory ledger."""

from types import SimpleNamespace

import pytest
from solders.keypair import Keypair

from cascadepay.constants import PROTOCOL_WALLET
from cascadepay.errors import InvalidAccountDataError
from cascadepay.rpc import (
    connect,
    detect_split_vault,
    fetch_split_config,
    fetch_token_balance,
    protocol_ata_exists,
)


class LedgerRpcClient:
    """Stands in for solana.rpc.api.Client, answering get_account_info from a ledger."""

    def __init__(self, ledger):
        self._ledger = ledger

    def get_account_info(self, pubkey):
        account = self._ledger.get_account(pubkey)
        if account is None:
            return SimpleNamespace(value=None)
        return SimpleNamespace(
            value=SimpleNamespace(owner=account.owner, data=account.data, lamports=account.lamports)
        )


@pytest.fixture
def rpc(ledger):
    return LedgerRpcClient(ledger)


class TestRpcReader:
    """Test decoding on-chain accounts through an RPC client."""

    def test_fetch_split_config(self, rpc, client, split):
        assert fetch_split_config(rpc, str(split)) == client.get_split_config(split)

    def test_fetch_missing_split_config(self, rpc):
        assert fetch_split_config(rpc, Keypair().pubkey()) is None

    def test_fetch_split_config_wrong_owner(self, rpc, alice_ata):
        with pytest.raises(InvalidAccountDataError, match="not owned by program"):
            fetch_split_config(rpc, alice_ata)

    def test_fetch_token_balance(self, rpc, split, fund_vault):
        vault = fund_vault(split, 77)

        assert fetch_token_balance(rpc, vault) == 77
        assert fetch_token_balance(rpc, Keypair().pubkey()) == 0

    def test_protocol_ata_exists(self, rpc, ledger, mint):
        assert not protocol_ata_exists(rpc, mint)
        ledger.create_token_account(PROTOCOL_WALLET, mint)
        assert protocol_ata_exists(rpc, mint)

    def test_detect_split_vault(self, rpc, client, split, alice_ata):
        vault = client.get_split_config(split).vault

        result = detect_split_vault(rpc, vault)

        assert result.is_split_vault
        assert result.split_config == split
        assert not detect_split_vault(rpc, alice_ata).is_split_vault
        assert not detect_split_vault(rpc, Keypair().pubkey()).is_split_vault

    def test_connect_uses_network_rpc(self, monkeypatch):
        monkeypatch.setattr("cascadepay.rpc.Client", lambda url: url)

        assert connect("solana-devnet") == "https://api.devnet.solana.com"
        assert connect("solana-devnet", rpc_url="http://localhost:8899") == "http://localhost:8899"
