"""Instruction entry points of the cascadepay program.

Each instruction runs as one ledger transaction: if any check or transfer
fails, every account mutation and event of that instruction is discarded.
Signers are passed explicitly and are assumed to have been verified by the
ledger before the instruction runs.
"""

import logging
from typing import Sequence

from solders.instruction import AccountMeta  # type: ignore
from solders.pubkey import Pubkey  # type: ignore

from ..config import DEFAULT_PROGRAM_CONFIG, ProgramConfig
from ..ledger import InMemoryLedger
from . import claim, distribution, lifecycle
from .distribution import SplitExecution
from .state import load_split_config
from .types import Recipient, SplitConfig

logger = logging.getLogger(__name__)


class CascadepayProgram:
    """The split program bound to a ledger.

    Args:
        ledger: Ledger hosting the program's accounts.
        config: Deployment settings. The protocol wallet is fixed here and
            cannot be supplied per instruction.
    """

    def __init__(self, ledger: InMemoryLedger, config: ProgramConfig = DEFAULT_PROGRAM_CONFIG):
        self._ledger = ledger
        self._config = config

    @property
    def ledger(self) -> InMemoryLedger:
        return self._ledger

    @property
    def config(self) -> ProgramConfig:
        return self._config

    @property
    def program_id(self) -> Pubkey:
        return self._config.program_id

    def create_split_config(
        self,
        authority: Pubkey,
        mint: Pubkey,
        recipients: Sequence[Recipient],
        recipient_atas: Sequence[AccountMeta],
    ) -> Pubkey:
        with self._ledger.transaction():
            return lifecycle.create_split_config(
                self._ledger, self._config, authority, mint, recipients, recipient_atas
            )

    def execute_split(
        self,
        split_config: Pubkey,
        vault: Pubkey,
        executor: Pubkey,
        remaining_accounts: Sequence[AccountMeta],
    ) -> SplitExecution:
        with self._ledger.transaction():
            return distribution.execute_split(
                self._ledger, self._config, split_config, vault, executor, remaining_accounts
            )

    def update_split_config(
        self,
        authority: Pubkey,
        split_config: Pubkey,
        vault: Pubkey,
        new_recipients: Sequence[Recipient],
        recipient_atas: Sequence[AccountMeta],
    ) -> SplitConfig:
        with self._ledger.transaction():
            return lifecycle.update_split_config(
                self._ledger, self._config, authority, split_config, vault, new_recipients, recipient_atas
            )

    def close_split_config(self, authority: Pubkey, split_config: Pubkey, vault: Pubkey) -> int:
        with self._ledger.transaction():
            return lifecycle.close_split_config(self._ledger, self._config, authority, split_config, vault)

    def claim_unclaimed(
        self,
        recipient: Pubkey,
        split_config: Pubkey,
        vault: Pubkey,
        recipient_ata: Pubkey,
    ) -> int:
        with self._ledger.transaction():
            return claim.claim_unclaimed(
                self._ledger, self._config, recipient, split_config, vault, recipient_ata
            )

    def get_split_config(self, split_config: Pubkey) -> SplitConfig:
        return load_split_config(self._ledger, self._config.program_id, split_config)
