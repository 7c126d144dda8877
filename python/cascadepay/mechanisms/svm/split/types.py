"""Types for Solana (SVM) split scheme."""

import json
from dataclasses import dataclass
from typing import Any

from cascadepay.constants import (
    MAX_RECIPIENTS,
    MIN_RECIPIENTS,
    PROTOCOL_FEE_BPS,
    REQUIRED_SPLIT_TOTAL,
)
from cascadepay.utils import validate_svm_address


@dataclass
class SvmSplitRecipient:
    """A recipient in a split payment on Solana."""

    address: str  # Solana address (base58)
    percentage_bps: int  # Basis points of the total (1-9900)

    def validate(self) -> None:
        if not validate_svm_address(self.address):
            raise ValueError(f"Invalid recipient address: {self.address}")
        if self.percentage_bps < 1 or self.percentage_bps > REQUIRED_SPLIT_TOTAL:
            raise ValueError(f"percentageBps must be 1-{REQUIRED_SPLIT_TOTAL}, got {self.percentage_bps}")

    def to_dict(self) -> dict[str, Any]:
        return {"address": self.address, "percentageBps": self.percentage_bps}


@dataclass
class SvmSplitConfig:
    """Split configuration advertised in payment requirements."""

    split_config: str
    recipients: list[SvmSplitRecipient]
    protocol_fee_bps: int = PROTOCOL_FEE_BPS

    def validate(self) -> None:
        if not validate_svm_address(self.split_config):
            raise ValueError(f"Invalid split config address: {self.split_config}")

        if not MIN_RECIPIENTS <= len(self.recipients) <= MAX_RECIPIENTS:
            raise ValueError(f"Must have between {MIN_RECIPIENTS} and {MAX_RECIPIENTS} recipients")

        for r in self.recipients:
            r.validate()

        addresses = [r.address for r in self.recipients]
        if len(set(addresses)) != len(addresses):
            raise ValueError("Duplicate recipient address")

        total_bps = sum(r.percentage_bps for r in self.recipients)
        if total_bps != REQUIRED_SPLIT_TOTAL:
            raise ValueError(f"Recipient bps must sum to {REQUIRED_SPLIT_TOTAL}, got {total_bps}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SvmSplitConfig":
        recipients = [
            SvmSplitRecipient(
                address=r["address"],
                percentage_bps=int(r["percentageBps"]),
            )
            for r in data.get("recipients", [])
        ]
        return cls(
            split_config=data["splitConfig"],
            recipients=recipients,
            protocol_fee_bps=int(data.get("protocolFeeBps", PROTOCOL_FEE_BPS)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "splitConfig": self.split_config,
            "recipients": [r.to_dict() for r in self.recipients],
            "protocolFeeBps": self.protocol_fee_bps,
        }


@dataclass
class SplitPaymentAuthorization:
    """What the payer signs: pay `amount` of `mint` into a split vault.

    The signed message is the canonical JSON encoding of the camelCase dict
    (sorted keys, no whitespace).
    """

    payer: str
    split_config: str
    vault: str
    mint: str
    amount: int
    nonce: str
    valid_before: int  # unix seconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "payer": self.payer,
            "splitConfig": self.split_config,
            "vault": self.vault,
            "mint": self.mint,
            "amount": str(self.amount),
            "nonce": self.nonce,
            "validBefore": self.valid_before,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SplitPaymentAuthorization":
        return cls(
            payer=data["payer"],
            split_config=data["splitConfig"],
            vault=data["vault"],
            mint=data["mint"],
            amount=int(data["amount"]),
            nonce=data["nonce"],
            valid_before=int(data["validBefore"]),
        )

    def message_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":")).encode()
