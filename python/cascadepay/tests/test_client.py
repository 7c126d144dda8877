"""Tests for the client SDK."""

import pytest
from solders.keypair import Keypair

from cascadepay.constants import PROTOCOL_WALLET, SOLANA_DEVNET_CAIP2
from cascadepay.errors import InsufficientFundsError
from cascadepay.program import SplitExecuted
from cascadepay.utils import (
    derive_ata,
    derive_protocol_ata,
    get_network_config,
    normalize_network,
    percentages_to_shares,
    validate_svm_address,
)


class TestAddresses:
    """Test address derivation helpers."""

    def test_config_pda_matches_created_config(self, client, split, mint):
        assert client.derive_split_config_pda(mint) == split

    def test_config_pda_for_other_authority(self, client, split, mint):
        assert client.derive_split_config_pda(mint, authority=Keypair().pubkey()) != split

    def test_vault_derivation(self, client, split, mint):
        assert client.derive_vault(split, mint) == client.get_split_config(split).vault

    def test_protocol_ata(self, client, mint):
        assert client.get_protocol_ata(mint) == derive_ata(PROTOCOL_WALLET, mint)
        assert client.get_protocol_ata(str(mint)) == derive_protocol_ata(mint)

    def test_protocol_ata_exists(self, ledger, client, mint):
        assert not client.protocol_ata_exists(mint)
        ledger.create_token_account(PROTOCOL_WALLET, mint)
        assert client.protocol_ata_exists(mint)

    def test_execute_accounts_order(self, client, split, mint, alice, bob):
        """Recipient ATAs in config order, protocol ATA last, all writable."""
        accounts = client.build_execute_split_accounts(split)

        assert [a.pubkey for a in accounts] == [
            derive_ata(alice.pubkey(), mint),
            derive_ata(bob.pubkey(), mint),
            derive_ata(PROTOCOL_WALLET, mint),
        ]
        assert all(a.is_writable and not a.is_signer for a in accounts)


class TestPayAndSplit:
    """Test the atomic pay-then-execute flow."""

    def test_pay_and_split(self, ledger, client, split, fund, alice_ata, bob_ata, protocol_ata):
        payer = Keypair()
        payer_ata = fund(payer.pubkey(), 2_000)

        execution = client.pay_and_split(split, 1_000, payer)

        assert ledger.token_balance(payer_ata) == 1_000
        assert ledger.token_balance(alice_ata) == 495
        assert ledger.token_balance(bob_ata) == 495
        assert ledger.token_balance(protocol_ata) == 10
        assert execution.total_amount == 1_000
        (event,) = ledger.events_of(SplitExecuted)
        assert event.executor == payer.pubkey()

    def test_refuses_without_protocol_ata(self, ledger, client, split, fund):
        payer = Keypair()
        payer_ata = fund(payer.pubkey(), 1_000)

        with pytest.raises(ValueError, match="Protocol ATA"):
            client.pay_and_split(split, 1_000, payer)
        assert ledger.token_balance(payer_ata) == 1_000

    def test_insufficient_funds_rolls_back(self, ledger, client, split, fund, protocol_ata):
        payer = Keypair()
        payer_ata = fund(payer.pubkey(), 10)

        with pytest.raises(InsufficientFundsError):
            client.pay_and_split(split, 1_000, payer)

        assert ledger.token_balance(payer_ata) == 10
        assert ledger.events_of(SplitExecuted) == []


class TestPreviewExecution:
    def test_preview_does_not_mutate(self, ledger, client, split, mint, fund_vault, alice, protocol_ata):
        ledger.close_token_account(derive_ata(alice.pubkey(), mint), alice.pubkey(), alice.pubkey())
        vault = fund_vault(split, 1_000)

        preview = client.preview_execution(split)

        assert preview.vault_balance == 1_000
        assert preview.total_amount == 1_000
        assert [s.amount for s in preview.shares] == [495, 495]
        assert [s.account_exists for s in preview.shares] == [False, True]
        assert preview.protocol_fee == 10
        assert preview.protocol_ata_exists
        assert preview.has_pending_funds
        assert ledger.token_balance(vault) == 1_000
        assert ledger.events_of(SplitExecuted) == []

    def test_preview_excludes_unclaimed(self, ledger, client, split, mint, fund_vault, alice, protocol_ata):
        ledger.close_token_account(derive_ata(alice.pubkey(), mint), alice.pubkey(), alice.pubkey())
        fund_vault(split, 1_000)
        client.execute_split(split)

        preview = client.preview_execution(split)

        assert preview.vault_balance == 495
        assert preview.unclaimed_total == 495
        assert not preview.has_pending_funds


class TestDetectSplitVault:
    """Test recognising split vaults as payment destinations."""

    def test_vault_is_detected(self, client, split):
        vault = client.get_split_config(split).vault

        result = client.detect_split_vault(vault)

        assert result.is_split_vault
        assert result.split_config == split

    def test_recipient_ata_is_not_a_vault(self, client, split, alice_ata):
        assert not client.detect_split_vault(alice_ata).is_split_vault

    def test_unknown_address_is_not_a_vault(self, client):
        assert not client.detect_split_vault(str(Keypair().pubkey())).is_split_vault

    def test_wallet_is_not_a_vault(self, client, authority):
        assert not client.detect_split_vault(authority.pubkey()).is_split_vault


class TestUtils:
    """Test SDK utility functions."""

    def test_percentages_to_shares(self):
        assert percentages_to_shares([49.5, 49.5]) == [4950, 4950]
        assert percentages_to_shares([60, 39]) == [6000, 3900]

    def test_percentages_must_sum_to_99(self):
        with pytest.raises(ValueError, match="sum to 99%"):
            percentages_to_shares([50, 50])

    def test_normalize_network(self):
        assert normalize_network("solana-devnet") == SOLANA_DEVNET_CAIP2
        assert normalize_network(SOLANA_DEVNET_CAIP2) == SOLANA_DEVNET_CAIP2
        with pytest.raises(ValueError, match="Unsupported Solana network"):
            normalize_network("eip155:1")

    def test_network_config_override(self):
        config = get_network_config("solana-devnet", rpc_url="http://localhost:8899")

        assert config["rpc_url"] == "http://localhost:8899"
        assert config["name"] == "devnet"
        assert get_network_config("solana-devnet")["rpc_url"] == "https://api.devnet.solana.com"

    def test_validate_svm_address(self):
        assert validate_svm_address(str(Keypair().pubkey()))
        assert not validate_svm_address("not-an-address")
        assert not validate_svm_address("")
