"""Audit events emitted to the program log for off-chain indexers."""

from dataclasses import dataclass, fields
from typing import Any

from solders.pubkey import Pubkey  # type: ignore


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


@dataclass(frozen=True)
class ProgramEvent:
    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"event": type(self).__name__}
        for f in fields(self):
            value = getattr(self, f.name)
            out[_camel(f.name)] = str(value) if isinstance(value, Pubkey) else value
        return out


@dataclass(frozen=True)
class SplitConfigCreated(ProgramEvent):
    config: Pubkey
    authority: Pubkey
    mint: Pubkey
    vault: Pubkey
    recipients_count: int
    timestamp: int


@dataclass(frozen=True)
class SplitConfigUpdated(ProgramEvent):
    config: Pubkey
    authority: Pubkey
    old_recipients_count: int
    new_recipients_count: int
    timestamp: int


@dataclass(frozen=True)
class SplitConfigClosed(ProgramEvent):
    config: Pubkey
    authority: Pubkey
    rent_reclaimed: int
    timestamp: int


@dataclass(frozen=True)
class SplitExecuted(ProgramEvent):
    config: Pubkey
    vault: Pubkey
    total_amount: int
    recipients_distributed: int
    protocol_fee: int
    held_count: int
    executor: Pubkey
    timestamp: int


@dataclass(frozen=True)
class RecipientPaymentHeld(ProgramEvent):
    config: Pubkey
    recipient: Pubkey
    amount: int
    reason: str
    timestamp: int


@dataclass(frozen=True)
class UnclaimedFundsClaimed(ProgramEvent):
    config: Pubkey
    recipient: Pubkey
    amount: int
    timestamp: int
