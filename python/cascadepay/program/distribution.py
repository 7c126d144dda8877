"""Split execution: drain the vault to recipients and the protocol.

Execution is permissionless. Any party (a payer, a facilitator bundling the
payment, a keeper) may trigger it as soon as the vault holds funds.

Funds already held for recipients stay in the vault to back their claims, so
the amount distributed on each run is the vault balance minus the total
unclaimed. For each recipient, in list order:

- token account valid   -> transfer the share (Delivered)
- token account missing -> add the share to the recipient's unclaimed entry (Held)
- token account invalid -> abort the whole execution

The protocol fee follows the same rule, except that a missing fee account
simply leaves the fee in the vault, where the next execution picks it up.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence, Union

from solders.instruction import AccountMeta  # type: ignore
from solders.pubkey import Pubkey  # type: ignore

from ..config import ProgramConfig
from ..errors import CascadepayError, ErrorCode
from ..ledger import InMemoryLedger
from .accounts import check_protocol_fee_account, check_recipient_account
from .events import RecipientPaymentHeld, SplitExecuted
from .split_math import calculate_split_amounts, checked_sub
from .state import load_split_config, signer_seeds, store_split_config

logger = logging.getLogger(__name__)

HELD_REASON_ATA_MISSING = "recipient_ata_missing"


@dataclass(frozen=True)
class Delivered:
    recipient: Pubkey
    account: Pubkey
    amount: int


@dataclass(frozen=True)
class Held:
    recipient: Pubkey
    amount: int


TransferOutcome = Union[Delivered, Held]


@dataclass(frozen=True)
class SplitExecution:
    """What one execution did."""

    config: Pubkey
    total_amount: int
    outcomes: list[TransferOutcome] = field(default_factory=list)
    protocol_fee: int = 0
    protocol_fee_paid: bool = False

    @property
    def delivered(self) -> list[Delivered]:
        return [o for o in self.outcomes if isinstance(o, Delivered)]

    @property
    def held(self) -> list[Held]:
        return [o for o in self.outcomes if isinstance(o, Held) and o.amount > 0]

    @property
    def delivered_total(self) -> int:
        return sum(o.amount for o in self.delivered)

    @property
    def held_total(self) -> int:
        return sum(o.amount for o in self.held)

    def to_dict(self) -> dict:
        return {
            "config": str(self.config),
            "totalAmount": str(self.total_amount),
            "delivered": [
                {"recipient": str(o.recipient), "account": str(o.account), "amount": str(o.amount)}
                for o in self.delivered
            ],
            "held": [{"recipient": str(o.recipient), "amount": str(o.amount)} for o in self.held],
            "protocolFee": str(self.protocol_fee),
            "protocolFeePaid": self.protocol_fee_paid,
        }


def execute_split(
    ledger: InMemoryLedger,
    program: ProgramConfig,
    config_address: Pubkey,
    vault: Pubkey,
    executor: Pubkey,
    remaining_accounts: Sequence[AccountMeta],
) -> SplitExecution:
    """Distribute the vault's unattributed balance.

    Args:
        remaining_accounts: Recipient token accounts in recipient order,
            followed by the protocol fee token account.

    Raises:
        CascadepayError: On a vault mismatch, account count mismatch, any
            rejected token account, unclaimed capacity, or arithmetic error.
    """
    config = load_split_config(ledger, program.program_id, config_address)
    if vault != config.vault:
        raise CascadepayError(ErrorCode.INVALID_VAULT, f"got {vault}, expected {config.vault}")
    if len(remaining_accounts) != len(config.recipients) + 1:
        raise CascadepayError(
            ErrorCode.RECIPIENT_ATA_COUNT_MISMATCH,
            f"{len(remaining_accounts)} accounts for {len(config.recipients)} recipients + protocol",
        )

    vault_balance = ledger.token_balance(vault)
    total = checked_sub(vault_balance, config.unclaimed_amounts.total())
    if total == 0:
        logger.debug("Split %s: nothing to distribute (vault=%d)", config_address, vault_balance)
        return SplitExecution(config=config_address, total_amount=0)

    amounts = calculate_split_amounts(total, config.recipients)
    seeds = signer_seeds(config)
    timestamp = ledger.unix_timestamp()
    outcomes: list[TransferOutcome] = []

    recipient_accounts = remaining_accounts[:-1]
    for (recipient, share), meta in zip(amounts.shares, recipient_accounts):
        check = check_recipient_account(ledger, meta.pubkey, recipient.address, config.mint)
        check.raise_if_rejected()

        if check.is_missing:
            if share > 0:
                config.unclaimed_amounts.accrue(recipient.address, share, timestamp)
                ledger.emit(
                    RecipientPaymentHeld(
                        config=config_address,
                        recipient=recipient.address,
                        amount=share,
                        reason=HELD_REASON_ATA_MISSING,
                        timestamp=timestamp,
                    )
                )
                logger.warning(
                    "Held %d for %s: token account %s does not exist",
                    share,
                    recipient.address,
                    meta.pubkey,
                )
            outcomes.append(Held(recipient.address, share))
            continue

        if share > 0:
            ledger.transfer_signed(vault, meta.pubkey, share, program.program_id, seeds)
        outcomes.append(Delivered(recipient.address, meta.pubkey, share))

    fee_account = remaining_accounts[-1].pubkey
    fee_check = check_protocol_fee_account(ledger, fee_account, config.mint, program.protocol_wallet)
    fee_check.raise_if_rejected()
    fee_paid = False
    if fee_check.is_valid:
        if amounts.protocol_fee > 0:
            ledger.transfer_signed(vault, fee_account, amounts.protocol_fee, program.program_id, seeds)
        fee_paid = True
    else:
        logger.warning(
            "Protocol fee account %s does not exist; %d stays in vault %s",
            fee_account,
            amounts.protocol_fee,
            vault,
        )

    store_split_config(ledger, program.program_id, config_address, config)

    execution = SplitExecution(
        config=config_address,
        total_amount=total,
        outcomes=outcomes,
        protocol_fee=amounts.protocol_fee,
        protocol_fee_paid=fee_paid,
    )
    ledger.emit(
        SplitExecuted(
            config=config_address,
            vault=vault,
            total_amount=total,
            recipients_distributed=len(execution.delivered),
            protocol_fee=amounts.protocol_fee,
            held_count=len(execution.held),
            executor=executor,
            timestamp=timestamp,
        )
    )
    logger.info(
        "Executed split %s: total=%d delivered=%d held=%d fee=%d (paid=%s)",
        config_address,
        total,
        execution.delivered_total,
        execution.held_total,
        amounts.protocol_fee,
        fee_paid,
    )
    return execution
