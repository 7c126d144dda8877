"""Account state types for the cascadepay program.

The split config is stored borsh-style: little-endian integers, 32-byte
addresses and u32 length-prefixed vectors, preceded by an 8-byte account
discriminator. The account is allocated at its maximum size, so decoding
tolerates trailing bytes.
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass, field
from typing import Any, Iterator

from solders.pubkey import Pubkey  # type: ignore

from ..constants import MAX_RECIPIENTS, MAX_UNCLAIMED_ENTRIES, SPLIT_CONFIG_VERSION, U64_MAX
from ..errors import CascadepayError, ErrorCode, InvalidAccountDataError
from ..utils import to_pubkey

DISCRIMINATOR_SIZE = 8


def account_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"account:{name}".encode()).digest()[:DISCRIMINATOR_SIZE]


SPLIT_CONFIG_DISCRIMINATOR = account_discriminator("SplitConfig")


@dataclass(frozen=True)
class Recipient:
    """A recipient and its share in basis points."""

    address: Pubkey
    percentage_bps: int  # u16

    STRUCT_SIZE = 34

    def to_bytes(self) -> bytes:
        return bytes(self.address) + struct.pack("<H", self.percentage_bps)

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> Recipient:
        address = Pubkey.from_bytes(data[offset : offset + 32])
        (bps,) = struct.unpack_from("<H", data, offset + 32)
        return cls(address, bps)

    def to_dict(self) -> dict[str, Any]:
        return {"address": str(self.address), "percentageBps": self.percentage_bps}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Recipient:
        return cls(
            address=to_pubkey(data["address"]),
            percentage_bps=int(data["percentageBps"]),
        )


@dataclass(frozen=True)
class UnclaimedAmount:
    """Funds held for a recipient whose token account was missing."""

    recipient: Pubkey
    amount: int  # u64
    timestamp: int  # i64

    STRUCT_SIZE = 48

    def to_bytes(self) -> bytes:
        return bytes(self.recipient) + struct.pack("<Qq", self.amount, self.timestamp)

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> UnclaimedAmount:
        recipient = Pubkey.from_bytes(data[offset : offset + 32])
        amount, timestamp = struct.unpack_from("<Qq", data, offset + 32)
        return cls(recipient, amount, timestamp)

    def to_dict(self) -> dict[str, Any]:
        return {
            "recipient": str(self.recipient),
            "amount": str(self.amount),
            "timestamp": self.timestamp,
        }


class UnclaimedLedger:
    """Bounded list of unclaimed amounts, at most one entry per recipient."""

    def __init__(self, entries: list[UnclaimedAmount] | None = None, capacity: int = MAX_UNCLAIMED_ENTRIES):
        self._capacity = capacity
        self._entries: list[UnclaimedAmount] = []
        for entry in entries or []:
            self.accrue(entry.recipient, entry.amount, entry.timestamp)

    def __iter__(self) -> Iterator[UnclaimedAmount]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, UnclaimedLedger):
            return self._entries == other._entries
        if isinstance(other, list):
            return self._entries == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"UnclaimedLedger({self._entries!r})"

    def get(self, recipient: Pubkey) -> UnclaimedAmount | None:
        for entry in self._entries:
            if entry.recipient == recipient:
                return entry
        return None

    def total(self) -> int:
        total = 0
        for entry in self._entries:
            total += entry.amount
            if total > U64_MAX:
                raise CascadepayError(ErrorCode.MATH_OVERFLOW, "unclaimed total")
        return total

    def accrue(self, recipient: Pubkey, amount: int, timestamp: int) -> UnclaimedAmount:
        """Add amount to the recipient's entry, creating it if needed.

        Raises:
            CascadepayError: TOO_MANY_UNCLAIMED_ENTRIES when a new entry would
                exceed capacity, MATH_OVERFLOW when the amount leaves u64.
        """
        for i, entry in enumerate(self._entries):
            if entry.recipient == recipient:
                new_amount = entry.amount + amount
                if new_amount > U64_MAX:
                    raise CascadepayError(ErrorCode.MATH_OVERFLOW, f"unclaimed amount for {recipient}")
                updated = UnclaimedAmount(recipient, new_amount, timestamp)
                self._entries[i] = updated
                return updated
        if len(self._entries) >= self._capacity:
            raise CascadepayError(ErrorCode.TOO_MANY_UNCLAIMED_ENTRIES)
        if amount > U64_MAX:
            raise CascadepayError(ErrorCode.MATH_OVERFLOW, f"unclaimed amount for {recipient}")
        entry = UnclaimedAmount(recipient, amount, timestamp)
        self._entries.append(entry)
        return entry

    def take(self, recipient: Pubkey) -> UnclaimedAmount:
        """Remove and return the recipient's entry.

        Raises:
            CascadepayError: NOTHING_TO_CLAIM if the recipient has no entry.
        """
        for i, entry in enumerate(self._entries):
            if entry.recipient == recipient:
                return self._entries.pop(i)
        raise CascadepayError(ErrorCode.NOTHING_TO_CLAIM)


@dataclass
class SplitConfig:
    """Persistent split configuration for one (authority, mint) pair."""

    authority: Pubkey
    mint: Pubkey
    vault: Pubkey
    recipients: list[Recipient]
    bump: int
    unclaimed_amounts: UnclaimedLedger = field(default_factory=UnclaimedLedger)
    version: int = SPLIT_CONFIG_VERSION

    # discriminator + version + 3 keys + two vec prefixes + max entries + bump
    MAX_SIZE = (
        DISCRIMINATOR_SIZE
        + 1
        + 32 * 3
        + 4
        + MAX_RECIPIENTS * Recipient.STRUCT_SIZE
        + 4
        + MAX_UNCLAIMED_ENTRIES * UnclaimedAmount.STRUCT_SIZE
        + 1
    )

    def __post_init__(self) -> None:
        if not isinstance(self.unclaimed_amounts, UnclaimedLedger):
            self.unclaimed_amounts = UnclaimedLedger(list(self.unclaimed_amounts))

    def to_bytes(self) -> bytes:
        buf = bytearray(SPLIT_CONFIG_DISCRIMINATOR)
        buf += struct.pack("<B", self.version)
        buf += bytes(self.authority) + bytes(self.mint) + bytes(self.vault)
        buf += struct.pack("<I", len(self.recipients))
        for recipient in self.recipients:
            buf += recipient.to_bytes()
        buf += struct.pack("<I", len(self.unclaimed_amounts))
        for entry in self.unclaimed_amounts:
            buf += entry.to_bytes()
        buf += struct.pack("<B", self.bump)
        return bytes(buf)

    @classmethod
    def from_bytes(cls, data: bytes) -> SplitConfig:
        """Decode a split config account.

        Raises:
            InvalidAccountDataError: On a discriminator mismatch or truncated data.
        """
        if data[:DISCRIMINATOR_SIZE] != SPLIT_CONFIG_DISCRIMINATOR:
            raise InvalidAccountDataError("Account discriminator mismatch: not a SplitConfig")
        try:
            off = DISCRIMINATOR_SIZE
            (version,) = struct.unpack_from("<B", data, off); off += 1
            authority = Pubkey.from_bytes(data[off : off + 32]); off += 32
            mint = Pubkey.from_bytes(data[off : off + 32]); off += 32
            vault = Pubkey.from_bytes(data[off : off + 32]); off += 32

            (n,) = struct.unpack_from("<I", data, off); off += 4
            if n > MAX_RECIPIENTS:
                raise InvalidAccountDataError(f"Recipient vector length {n} exceeds {MAX_RECIPIENTS}")
            recipients = []
            for _ in range(n):
                recipients.append(Recipient.from_bytes(data, off)); off += Recipient.STRUCT_SIZE

            (m,) = struct.unpack_from("<I", data, off); off += 4
            if m > MAX_UNCLAIMED_ENTRIES:
                raise InvalidAccountDataError(f"Unclaimed vector length {m} exceeds {MAX_UNCLAIMED_ENTRIES}")
            unclaimed = []
            for _ in range(m):
                unclaimed.append(UnclaimedAmount.from_bytes(data, off))
                off += UnclaimedAmount.STRUCT_SIZE

            (bump,) = struct.unpack_from("<B", data, off)
        except (struct.error, ValueError) as e:
            raise InvalidAccountDataError(f"Truncated SplitConfig data: {e}") from e

        return cls(
            authority=authority,
            mint=mint,
            vault=vault,
            recipients=recipients,
            bump=bump,
            unclaimed_amounts=UnclaimedLedger(unclaimed),
            version=version,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "authority": str(self.authority),
            "mint": str(self.mint),
            "vault": str(self.vault),
            "recipients": [r.to_dict() for r in self.recipients],
            "unclaimedAmounts": [u.to_dict() for u in self.unclaimed_amounts],
            "bump": self.bump,
        }
