"""Tests for the in-memory ledger platform."""

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from cascadepay.constants import PROGRAM_ID, SPLIT_CONFIG_SEED, TOKEN_2022_PROGRAM_ID
from cascadepay.errors import (
    AccountAlreadyExistsError,
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAccountDataError,
    MissingSignatureError,
)
from cascadepay.utils import derive_ata, minimum_balance_for_rent_exemption


class TestTransactions:
    """Test atomic transaction semantics."""

    def test_failed_transaction_leaves_no_trace(self, ledger, mint, fund, alice, bob):
        """Every mutation and event of a failed transaction is rolled back."""
        alice_ata = fund(alice.pubkey(), 100)
        bob_ata = ledger.create_token_account(bob.pubkey(), mint)

        with pytest.raises(InsufficientFundsError):
            with ledger.transaction():
                ledger.transfer(alice_ata, bob_ata, 60, alice.pubkey())
                ledger.emit("transferred")
                ledger.transfer(alice_ata, bob_ata, 60, alice.pubkey())

        assert ledger.token_balance(alice_ata) == 100
        assert ledger.token_balance(bob_ata) == 0
        assert "transferred" not in ledger.events

    def test_nested_transactions_join_outer(self, ledger, mint, fund, alice, bob):
        """A nested block that succeeds is still undone if the outer one fails."""
        alice_ata = fund(alice.pubkey(), 100)
        bob_ata = ledger.create_token_account(bob.pubkey(), mint)

        with pytest.raises(RuntimeError):
            with ledger.transaction():
                with ledger.transaction():
                    ledger.transfer(alice_ata, bob_ata, 10, alice.pubkey())
                raise RuntimeError("abort")

        assert ledger.token_balance(bob_ata) == 0

    def test_committed_transaction(self, ledger, mint, fund, alice, bob):
        alice_ata = fund(alice.pubkey(), 100)
        bob_ata = ledger.create_token_account(bob.pubkey(), mint)

        with ledger.transaction():
            ledger.transfer(alice_ata, bob_ata, 30, alice.pubkey())

        assert ledger.token_balance(alice_ata) == 70
        assert ledger.token_balance(bob_ata) == 30


class TestAccounts:
    """Test account allocation and ownership."""

    def test_create_account_debits_rent(self, ledger, authority):
        before = ledger.lamports(authority.pubkey())
        address = Keypair().pubkey()

        account = ledger.create_account(address, PROGRAM_ID, 100, payer=authority.pubkey())

        assert account.lamports == minimum_balance_for_rent_exemption(100)
        assert len(account.data) == 100
        assert ledger.lamports(authority.pubkey()) == before - account.lamports

    def test_create_account_twice(self, ledger):
        address = Keypair().pubkey()
        ledger.create_account(address, PROGRAM_ID, 10, payer=None)

        with pytest.raises(AccountAlreadyExistsError):
            ledger.create_account(address, PROGRAM_ID, 10, payer=None)

    def test_create_account_without_lamports(self, ledger):
        poor = Keypair().pubkey()

        with pytest.raises(InsufficientFundsError):
            ledger.create_account(Keypair().pubkey(), PROGRAM_ID, 10, payer=poor)

    def test_only_owner_program_writes(self, ledger):
        address = Keypair().pubkey()
        ledger.create_account(address, PROGRAM_ID, 10, payer=None)

        with pytest.raises(MissingSignatureError):
            ledger.write_data(address, Keypair().pubkey(), b"hi")

        ledger.write_data(address, PROGRAM_ID, b"hi")
        assert ledger.require_account(address).data == b"hi" + b"\x00" * 8

    def test_require_missing_account(self, ledger):
        with pytest.raises(AccountNotFoundError):
            ledger.require_account(Keypair().pubkey())


class TestTokens:
    """Test token accounts, minting and transfers."""

    def test_token_account_defaults_to_ata(self, ledger, mint, alice):
        address = ledger.create_token_account(alice.pubkey(), mint)

        assert address == derive_ata(alice.pubkey(), mint)
        assert ledger.get_token_account(address).owner == alice.pubkey()

    def test_token_2022_mint(self, ledger, mint_authority, alice):
        mint = ledger.create_mint(mint_authority.pubkey(), token_program=TOKEN_2022_PROGRAM_ID)

        address = ledger.create_token_account(alice.pubkey(), mint)

        assert ledger.token_program_of(mint) == TOKEN_2022_PROGRAM_ID
        assert address == derive_ata(alice.pubkey(), mint, TOKEN_2022_PROGRAM_ID)

    def test_mint_to_requires_authority(self, ledger, mint, alice_ata):
        with pytest.raises(MissingSignatureError):
            ledger.mint_to(mint, alice_ata, 1, Keypair().pubkey())

    def test_transfer_requires_owner(self, ledger, fund, alice, bob_ata, bob):
        alice_ata = fund(alice.pubkey(), 10)

        with pytest.raises(MissingSignatureError):
            ledger.transfer(alice_ata, bob_ata, 5, bob.pubkey())

    def test_transfer_rejects_mint_mismatch(self, ledger, fund, alice, bob, mint_authority):
        alice_ata = fund(alice.pubkey(), 10)
        other_mint = ledger.create_mint(mint_authority.pubkey())
        bob_other = ledger.create_token_account(bob.pubkey(), other_mint)

        with pytest.raises(InvalidAccountDataError, match="Mint mismatch"):
            ledger.transfer(alice_ata, bob_other, 5, alice.pubkey())

    def test_token_balance_of_missing_account(self, ledger):
        assert ledger.token_balance(Keypair().pubkey()) == 0

    def test_owner_closes_empty_token_account(self, ledger, alice, alice_ata):
        lamports = ledger.lamports(alice_ata)

        reclaimed = ledger.close_token_account(alice_ata, alice.pubkey(), alice.pubkey())

        assert reclaimed == lamports
        assert not ledger.account_exists(alice_ata)
        assert ledger.lamports(alice.pubkey()) == lamports

    def test_cannot_close_funded_token_account(self, ledger, fund, alice):
        alice_ata = fund(alice.pubkey(), 1)

        with pytest.raises(InvalidAccountDataError, match="still holds"):
            ledger.close_token_account(alice_ata, alice.pubkey(), alice.pubkey())


class TestProgramDerivedSigning:
    """Test transfers out of PDA-owned token accounts."""

    def test_valid_seeds_sign_for_pda(self, ledger, mint, fund, alice, authority):
        seeds_base = [SPLIT_CONFIG_SEED, bytes(authority.pubkey()), bytes(mint)]
        pda, bump = Pubkey.find_program_address(seeds_base, PROGRAM_ID)
        vault = ledger.create_token_account(pda, mint)
        fund(alice.pubkey(), 0)
        ledger.mint_to(mint, vault, 50, ledger.get_mint(mint).mint_authority)

        ledger.transfer_signed(vault, derive_ata(alice.pubkey(), mint), 20, PROGRAM_ID, seeds_base + [bytes([bump])])

        assert ledger.token_balance(vault) == 30

    def test_other_program_cannot_sign(self, ledger, mint, fund, alice, authority):
        seeds_base = [SPLIT_CONFIG_SEED, bytes(authority.pubkey()), bytes(mint)]
        pda, bump = Pubkey.find_program_address(seeds_base, PROGRAM_ID)
        vault = ledger.create_token_account(pda, mint)
        alice_ata = fund(alice.pubkey(), 0)

        with pytest.raises(MissingSignatureError):
            ledger.transfer_signed(vault, alice_ata, 0, Keypair().pubkey(), seeds_base + [bytes([bump])])


class TestProgramLog:
    def test_events_of_filters_by_type(self, ledger):
        ledger.emit("a")
        ledger.emit(1)

        assert ledger.events == ["a", 1]
        assert ledger.events_of(int) == [1]

    def test_clock(self, ledger):
        assert ledger.unix_timestamp() == 1_700_000_000
