"""Client SDK for the cascadepay split program.

Derives addresses, assembles the account lists each instruction expects and
submits instructions on behalf of a wallet.

Example:
    ```python
    ledger = InMemoryLedger()
    client = CascadepayClient(CascadepayProgram(ledger), wallet=authority)

    config = client.create_split_config(
        mint,
        [Recipient(alice, 4950), Recipient(bob, 4950)],
    )
    client.execute_split(config)
    ```
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

from solders.instruction import AccountMeta  # type: ignore
from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.signature import Signature  # type: ignore

from .constants import MAX_RECIPIENTS, MIN_RECIPIENTS, REQUIRED_SPLIT_TOTAL
from .errors import LedgerError
from .ledger import InMemoryLedger
from .program.distribution import SplitExecution
from .program.processor import CascadepayProgram
from .program.split_math import calculate_split_amounts
from .program.types import Recipient, SplitConfig
from .token import TokenAccount
from .utils import (
    AddressLike,
    derive_ata,
    derive_protocol_ata,
    derive_split_config_pda,
    derive_vault,
    to_pubkey,
)

logger = logging.getLogger(__name__)

RecipientLike = Recipient | dict[str, Any]


@dataclass(frozen=True)
class DetectionResult:
    is_split_vault: bool
    split_config: Pubkey | None = None


@dataclass(frozen=True)
class PlannedShare:
    recipient: Pubkey
    account: Pubkey
    amount: int
    account_exists: bool


@dataclass(frozen=True)
class ExecutionPreview:
    """What execute_split would do right now, without doing it."""

    vault_balance: int
    unclaimed_total: int
    total_amount: int
    shares: list[PlannedShare] = field(default_factory=list)
    protocol_fee: int = 0
    protocol_ata_exists: bool = False

    @property
    def has_pending_funds(self) -> bool:
        return self.total_amount > 0


def _to_recipient(value: RecipientLike) -> Recipient:
    if isinstance(value, Recipient):
        return value
    return Recipient.from_dict(value)


def _check_recipients(recipients: Sequence[Recipient]) -> None:
    total = sum(r.percentage_bps for r in recipients)
    if total != REQUIRED_SPLIT_TOTAL:
        raise ValueError(
            f"Recipient shares must sum to {REQUIRED_SPLIT_TOTAL} basis points (99%), got {total}. "
            "Protocol gets 1%."
        )
    if not MIN_RECIPIENTS <= len(recipients) <= MAX_RECIPIENTS:
        raise ValueError(f"Must have between {MIN_RECIPIENTS} and {MAX_RECIPIENTS} recipients")


class CascadepayClient:
    """SDK wrapper around a CascadepayProgram for one wallet.

    Args:
        program: The program to submit instructions to.
        wallet: Keypair signing authority-gated instructions and paying rent.
    """

    def __init__(self, program: CascadepayProgram, wallet: Keypair):
        self._program = program
        self._wallet = wallet

    @property
    def ledger(self) -> InMemoryLedger:
        return self._program.ledger

    @property
    def program(self) -> CascadepayProgram:
        return self._program

    @property
    def wallet(self) -> Pubkey:
        return self._wallet.pubkey()

    def sign_message(self, message: bytes) -> Signature:
        return self._wallet.sign_message(message)

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------

    def derive_split_config_pda(self, mint: AddressLike, authority: AddressLike | None = None) -> Pubkey:
        """Split config address for an authority (default: this wallet) and mint."""
        pda, _ = derive_split_config_pda(authority or self.wallet, mint, self._program.program_id)
        return pda

    def derive_vault(self, split_config: AddressLike, mint: AddressLike) -> Pubkey:
        mint = to_pubkey(mint)
        return derive_vault(split_config, mint, self.ledger.token_program_of(mint))

    def get_split_config(self, split_config: AddressLike) -> SplitConfig:
        return self._program.get_split_config(to_pubkey(split_config))

    def get_protocol_ata(self, mint: AddressLike) -> Pubkey:
        """Protocol fee token account for a mint."""
        mint = to_pubkey(mint)
        return derive_protocol_ata(
            mint, self.ledger.token_program_of(mint), self._program.config.protocol_wallet
        )

    def protocol_ata_exists(self, mint: AddressLike) -> bool:
        return self.ledger.account_exists(self.get_protocol_ata(mint))

    def _recipient_atas(
        self,
        mint: Pubkey,
        recipients: Sequence[Recipient],
        is_writable: bool,
    ) -> list[AccountMeta]:
        token_program = self.ledger.token_program_of(mint)
        return [
            AccountMeta(derive_ata(r.address, mint, token_program), is_signer=False, is_writable=is_writable)
            for r in recipients
        ]

    def build_execute_split_accounts(self, split_config: AddressLike) -> list[AccountMeta]:
        """Remaining accounts for execute_split: recipient ATAs, then the protocol ATA."""
        config = self.get_split_config(split_config)
        metas = self._recipient_atas(config.mint, config.recipients, is_writable=True)
        metas.append(AccountMeta(self.get_protocol_ata(config.mint), is_signer=False, is_writable=True))
        return metas

    # ------------------------------------------------------------------
    # Instructions
    # ------------------------------------------------------------------

    def create_split_config(self, mint: AddressLike, recipients: Sequence[RecipientLike]) -> Pubkey:
        """Create a split config with this wallet as authority.

        Raises:
            ValueError: If recipients do not sum to 9900 bps or their count is
                outside 2-20.
        """
        mint = to_pubkey(mint)
        normalized = [_to_recipient(r) for r in recipients]
        _check_recipients(normalized)
        return self._program.create_split_config(
            self.wallet,
            mint,
            normalized,
            self._recipient_atas(mint, normalized, is_writable=False),
        )

    def execute_split(self, split_config: AddressLike, executor: AddressLike | None = None) -> SplitExecution:
        """Drain the vault. Anyone may execute; executor defaults to this wallet."""
        split_config = to_pubkey(split_config)
        config = self.get_split_config(split_config)
        return self._program.execute_split(
            split_config,
            config.vault,
            to_pubkey(executor) if executor else self.wallet,
            self.build_execute_split_accounts(split_config),
        )

    def claim_unclaimed(self, split_config: AddressLike, recipient: Keypair) -> int:
        split_config = to_pubkey(split_config)
        config = self.get_split_config(split_config)
        token_program = self.ledger.token_program_of(config.mint)
        return self._program.claim_unclaimed(
            recipient.pubkey(),
            split_config,
            config.vault,
            derive_ata(recipient.pubkey(), config.mint, token_program),
        )

    def update_split_config(self, split_config: AddressLike, new_recipients: Sequence[RecipientLike]) -> SplitConfig:
        """Replace recipients. Requires an empty vault."""
        split_config = to_pubkey(split_config)
        normalized = [_to_recipient(r) for r in new_recipients]
        _check_recipients(normalized)
        config = self.get_split_config(split_config)
        return self._program.update_split_config(
            self.wallet,
            split_config,
            config.vault,
            normalized,
            self._recipient_atas(config.mint, normalized, is_writable=False),
        )

    def close_split_config(self, split_config: AddressLike) -> int:
        """Close config and vault. Requires an empty vault and no unclaimed funds."""
        split_config = to_pubkey(split_config)
        config = self.get_split_config(split_config)
        return self._program.close_split_config(self.wallet, split_config, config.vault)

    def pay_and_split(
        self,
        split_config: AddressLike,
        amount: int,
        payer: Keypair | Pubkey,
        executor: AddressLike | None = None,
    ) -> SplitExecution:
        """Transfer from the payer into the vault and execute, atomically.

        Args:
            payer: Paying wallet. A bare Pubkey means the caller has already
                verified the payer's authorization (a facilitator settling a
                signed payment).
            executor: Recorded executor; defaults to the payer.

        Raises:
            ValueError: If the protocol fee account does not exist yet.
        """
        payer_key = payer.pubkey() if isinstance(payer, Keypair) else payer
        split_config = to_pubkey(split_config)
        config = self.get_split_config(split_config)
        if not self.protocol_ata_exists(config.mint):
            raise ValueError(
                f"Protocol ATA ({self.get_protocol_ata(config.mint)}) does not exist for mint "
                f"{config.mint}. Create it before executing split."
            )
        token_program = self.ledger.token_program_of(config.mint)
        payer_ata = derive_ata(payer_key, config.mint, token_program)
        executor_key = to_pubkey(executor) if executor else payer_key
        remaining = self.build_execute_split_accounts(split_config)

        with self.ledger.transaction():
            self.ledger.transfer(payer_ata, config.vault, amount, payer_key)
            execution = self._program.execute_split(split_config, config.vault, executor_key, remaining)
        logger.info("Paid %d into %s and split it", amount, config.vault)
        return execution

    # ------------------------------------------------------------------
    # Read-only helpers
    # ------------------------------------------------------------------

    def preview_execution(self, split_config: AddressLike) -> ExecutionPreview:
        config = self.get_split_config(split_config)
        vault_balance = self.ledger.token_balance(config.vault)
        unclaimed = sum(u.amount for u in config.unclaimed_amounts)
        total = max(vault_balance - unclaimed, 0)
        amounts = calculate_split_amounts(total, config.recipients)
        token_program = self.ledger.token_program_of(config.mint)
        shares = []
        for recipient, amount in amounts.shares:
            ata = derive_ata(recipient.address, config.mint, token_program)
            shares.append(PlannedShare(recipient.address, ata, amount, self.ledger.account_exists(ata)))
        return ExecutionPreview(
            vault_balance=vault_balance,
            unclaimed_total=unclaimed,
            total_amount=total,
            shares=shares,
            protocol_fee=amounts.protocol_fee,
            protocol_ata_exists=self.protocol_ata_exists(config.mint),
        )

    def detect_split_vault(self, destination: AddressLike) -> DetectionResult:
        """Check whether a payment destination is a split vault."""
        return detect_split_vault(self._program, to_pubkey(destination))


def detect_split_vault(program: CascadepayProgram, destination: Pubkey) -> DetectionResult:
    """A split vault is a token account whose owner is a split config naming it as vault."""
    account = program.ledger.get_account(destination)
    if account is None:
        return DetectionResult(is_split_vault=False)
    try:
        token_account = TokenAccount.from_bytes(account.data)
        config = program.get_split_config(token_account.owner)
    except LedgerError:
        return DetectionResult(is_split_vault=False)
    if config.vault != destination:
        return DetectionResult(is_split_vault=False)
    return DetectionResult(is_split_vault=True, split_config=token_account.owner)
