"""Tests for account layouts and the unclaimed ledger."""

import struct

import pytest
from solders.keypair import Keypair

from cascadepay.constants import U64_MAX
from cascadepay.errors import CascadepayError, ErrorCode, InvalidAccountDataError
from cascadepay.program.types import (
    SPLIT_CONFIG_DISCRIMINATOR,
    Recipient,
    SplitConfig,
    UnclaimedAmount,
    UnclaimedLedger,
)
from cascadepay.token import AccountState, Mint, TokenAccount


def _pk():
    return Keypair().pubkey()


def _config(unclaimed=None):
    return SplitConfig(
        authority=_pk(),
        mint=_pk(),
        vault=_pk(),
        recipients=[Recipient(_pk(), 6000), Recipient(_pk(), 3900)],
        bump=254,
        unclaimed_amounts=unclaimed or [],
    )


class TestSplitConfigLayout:
    """Test the split config account encoding."""

    def test_max_size(self):
        """Account space covers 20 recipients and 20 unclaimed entries."""
        assert SplitConfig.MAX_SIZE == 8 + 1 + 96 + 4 + 20 * 34 + 4 + 20 * 48 + 1

    def test_encoding_starts_with_discriminator_and_version(self):
        data = _config().to_bytes()

        assert data[:8] == SPLIT_CONFIG_DISCRIMINATOR
        assert data[8] == 1

    def test_decode_allocated_account(self):
        """Decoding ignores the zero padding of a max-size account."""
        config = _config([UnclaimedAmount(_pk(), 42, 1_700_000_000)])
        data = config.to_bytes().ljust(SplitConfig.MAX_SIZE, b"\x00")

        decoded = SplitConfig.from_bytes(data)

        assert decoded == config
        assert decoded.unclaimed_amounts.total() == 42

    def test_wrong_discriminator(self):
        data = b"\x00" * 8 + _config().to_bytes()[8:]

        with pytest.raises(InvalidAccountDataError, match="discriminator"):
            SplitConfig.from_bytes(data)

    def test_truncated_data(self):
        data = _config().to_bytes()[:60]

        with pytest.raises(InvalidAccountDataError, match="Truncated"):
            SplitConfig.from_bytes(data)

    def test_oversized_recipient_vector(self):
        data = bytearray(_config().to_bytes())
        struct.pack_into("<I", data, 8 + 1 + 96, 21)

        with pytest.raises(InvalidAccountDataError, match="exceeds"):
            SplitConfig.from_bytes(bytes(data))

    def test_to_dict_uses_camel_case(self):
        config = _config()

        result = config.to_dict()

        assert result["recipients"][0]["percentageBps"] == 6000
        assert result["unclaimedAmounts"] == []
        assert result["vault"] == str(config.vault)


class TestRecipient:
    """Test recipient encoding helpers."""

    def test_bytes_layout(self):
        recipient = Recipient(_pk(), 4950)

        data = recipient.to_bytes()

        assert len(data) == Recipient.STRUCT_SIZE
        assert Recipient.from_bytes(data) == recipient

    def test_from_dict_accepts_base58(self):
        address = _pk()

        recipient = Recipient.from_dict({"address": str(address), "percentageBps": "4950"})

        assert recipient == Recipient(address, 4950)


class TestUnclaimedLedger:
    """Test the bounded unclaimed ledger."""

    def test_accrue_accumulates_and_refreshes_timestamp(self):
        """Repeated holds for one recipient merge into a single entry."""
        ledger = UnclaimedLedger()
        recipient = _pk()

        ledger.accrue(recipient, 100, 1)
        entry = ledger.accrue(recipient, 50, 2)

        assert len(ledger) == 1
        assert entry == UnclaimedAmount(recipient, 150, 2)

    def test_capacity(self):
        ledger = UnclaimedLedger(capacity=2)
        ledger.accrue(_pk(), 1, 0)
        existing = _pk()
        ledger.accrue(existing, 1, 0)

        with pytest.raises(CascadepayError) as exc_info:
            ledger.accrue(_pk(), 1, 0)
        assert exc_info.value.code == ErrorCode.TOO_MANY_UNCLAIMED_ENTRIES

        # Existing entries can still grow at capacity
        assert ledger.accrue(existing, 1, 0).amount == 2

    def test_amount_overflow(self):
        ledger = UnclaimedLedger()
        recipient = _pk()
        ledger.accrue(recipient, U64_MAX, 0)

        with pytest.raises(CascadepayError) as exc_info:
            ledger.accrue(recipient, 1, 0)
        assert exc_info.value.code == ErrorCode.MATH_OVERFLOW

    def test_take_removes_entry(self):
        ledger = UnclaimedLedger()
        recipient = _pk()
        ledger.accrue(recipient, 7, 0)

        entry = ledger.take(recipient)

        assert entry.amount == 7
        assert not ledger
        assert ledger.get(recipient) is None

    def test_take_without_entry(self):
        with pytest.raises(CascadepayError) as exc_info:
            UnclaimedLedger().take(_pk())
        assert exc_info.value.code == ErrorCode.NOTHING_TO_CLAIM


class TestTokenLayouts:
    """Test SPL token account and mint layouts."""

    def test_token_account_layout(self):
        account = TokenAccount(mint=_pk(), owner=_pk(), amount=123, close_authority=_pk())

        data = account.to_bytes()

        assert len(data) == 165
        assert TokenAccount.from_bytes(data) == account

    def test_token_account_extensions_ignored(self):
        account = TokenAccount(mint=_pk(), owner=_pk(), amount=5)

        assert TokenAccount.from_bytes(account.to_bytes() + b"\x01" * 20) == account

    def test_uninitialized_token_account(self):
        data = TokenAccount(mint=_pk(), owner=_pk(), amount=0, state=AccountState.UNINITIALIZED).to_bytes()

        with pytest.raises(InvalidAccountDataError, match="not initialized"):
            TokenAccount.from_bytes(data)

    def test_short_token_account(self):
        with pytest.raises(InvalidAccountDataError, match="too short"):
            TokenAccount.from_bytes(b"\x00" * 100)

    def test_mint_layout(self):
        mint = Mint(mint_authority=_pk(), supply=10**12, decimals=6)

        data = mint.to_bytes()

        assert len(data) == 82
        assert Mint.from_bytes(data) == mint
