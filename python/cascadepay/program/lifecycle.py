"""Create, update and close split configurations."""

import logging
from typing import Sequence

from solders.instruction import AccountMeta  # type: ignore
from solders.pubkey import Pubkey  # type: ignore

from ..config import ProgramConfig
from ..constants import MAX_RECIPIENTS, MIN_RECIPIENTS, REQUIRED_SPLIT_TOTAL
from ..errors import CascadepayError, ErrorCode
from ..ledger import InMemoryLedger
from ..utils import derive_split_config_pda, derive_vault
from .accounts import require_recipient_account
from .events import SplitConfigClosed, SplitConfigCreated, SplitConfigUpdated
from .split_math import checked_add
from .state import load_split_config, signer_seeds, store_split_config
from .types import Recipient, SplitConfig

logger = logging.getLogger(__name__)

ZERO_ADDRESS = Pubkey.default()


def validate_recipients(recipients: Sequence[Recipient]) -> None:
    """Enforce the structural invariants of a recipient list.

    Raises:
        CascadepayError: INVALID_RECIPIENT_COUNT, ZERO_ADDRESS,
            ZERO_PERCENTAGE, DUPLICATE_RECIPIENT or INVALID_SPLIT_TOTAL.
    """
    if not MIN_RECIPIENTS <= len(recipients) <= MAX_RECIPIENTS:
        raise CascadepayError(ErrorCode.INVALID_RECIPIENT_COUNT, f"got {len(recipients)}")

    seen: set[Pubkey] = set()
    total = 0
    for recipient in recipients:
        if recipient.address == ZERO_ADDRESS:
            raise CascadepayError(ErrorCode.ZERO_ADDRESS)
        if recipient.percentage_bps <= 0:
            raise CascadepayError(ErrorCode.ZERO_PERCENTAGE, str(recipient.address))
        if recipient.address in seen:
            raise CascadepayError(ErrorCode.DUPLICATE_RECIPIENT, str(recipient.address))
        seen.add(recipient.address)
        total = checked_add(total, recipient.percentage_bps)

    if total != REQUIRED_SPLIT_TOTAL:
        raise CascadepayError(ErrorCode.INVALID_SPLIT_TOTAL, f"got {total}")


def validate_recipient_accounts(
    ledger: InMemoryLedger,
    recipients: Sequence[Recipient],
    recipient_atas: Sequence[AccountMeta],
    mint: Pubkey,
) -> None:
    """Every recipient token account must exist, be read-only and be valid."""
    if len(recipient_atas) != len(recipients):
        raise CascadepayError(
            ErrorCode.RECIPIENT_ATA_COUNT_MISMATCH,
            f"{len(recipient_atas)} accounts for {len(recipients)} recipients",
        )
    for recipient, meta in zip(recipients, recipient_atas):
        if meta.is_writable:
            raise CascadepayError(ErrorCode.RECIPIENT_ATA_SHOULD_BE_READ_ONLY, str(meta.pubkey))
        require_recipient_account(ledger, meta.pubkey, recipient.address, mint)


def _require_authority(config: SplitConfig, signer: Pubkey) -> None:
    if signer != config.authority:
        raise CascadepayError(ErrorCode.UNAUTHORIZED, f"signer {signer}")


def _require_vault(config: SplitConfig, vault: Pubkey) -> None:
    if vault != config.vault:
        raise CascadepayError(ErrorCode.INVALID_VAULT, f"got {vault}, expected {config.vault}")


def _require_empty_vault(ledger: InMemoryLedger, config: SplitConfig) -> None:
    balance = ledger.token_balance(config.vault)
    if balance != 0:
        raise CascadepayError(ErrorCode.VAULT_NOT_EMPTY, f"balance {balance}")


def create_split_config(
    ledger: InMemoryLedger,
    program: ProgramConfig,
    authority: Pubkey,
    mint: Pubkey,
    recipients: Sequence[Recipient],
    recipient_atas: Sequence[AccountMeta],
) -> Pubkey:
    """Create a split config and its vault.

    The config lives at the PDA of (seed, authority, mint); the vault is the
    config PDA's associated token account, so only this program can move its
    funds. The authority pays rent for both accounts.

    Returns:
        The split config address.
    """
    validate_recipients(recipients)

    token_program = ledger.token_program_of(mint)
    config_address, bump = derive_split_config_pda(authority, mint, program.program_id)
    vault = derive_vault(config_address, mint, token_program)

    validate_recipient_accounts(ledger, recipients, recipient_atas, mint)

    config = SplitConfig(
        authority=authority,
        mint=mint,
        vault=vault,
        recipients=list(recipients),
        bump=bump,
    )
    ledger.create_account(config_address, program.program_id, SplitConfig.MAX_SIZE, payer=authority)
    ledger.create_token_account(config_address, mint, payer=authority, address=vault)
    store_split_config(ledger, program.program_id, config_address, config)

    timestamp = ledger.unix_timestamp()
    ledger.emit(
        SplitConfigCreated(
            config=config_address,
            authority=authority,
            mint=mint,
            vault=vault,
            recipients_count=len(recipients),
            timestamp=timestamp,
        )
    )
    logger.info(
        "Created split config %s (mint=%s, vault=%s, recipients=%d)",
        config_address,
        mint,
        vault,
        len(recipients),
    )
    return config_address


def update_split_config(
    ledger: InMemoryLedger,
    program: ProgramConfig,
    authority: Pubkey,
    config_address: Pubkey,
    vault: Pubkey,
    new_recipients: Sequence[Recipient],
    recipient_atas: Sequence[AccountMeta],
) -> SplitConfig:
    """Replace the recipients of an existing config.

    Only the authority may update, and only while the vault is empty so that
    no funds in flight are attributed to the wrong share table.
    """
    config = load_split_config(ledger, program.program_id, config_address)
    _require_authority(config, authority)
    _require_vault(config, vault)
    _require_empty_vault(ledger, config)

    validate_recipients(new_recipients)
    validate_recipient_accounts(ledger, new_recipients, recipient_atas, config.mint)

    old_count = len(config.recipients)
    config.recipients = list(new_recipients)
    store_split_config(ledger, program.program_id, config_address, config)

    ledger.emit(
        SplitConfigUpdated(
            config=config_address,
            authority=authority,
            old_recipients_count=old_count,
            new_recipients_count=len(new_recipients),
            timestamp=ledger.unix_timestamp(),
        )
    )
    logger.info(
        "Updated split config %s: %d -> %d recipients",
        config_address,
        old_count,
        len(new_recipients),
    )
    return config


def close_split_config(
    ledger: InMemoryLedger,
    program: ProgramConfig,
    authority: Pubkey,
    config_address: Pubkey,
    vault: Pubkey,
) -> int:
    """Close a config and its vault, returning all rent to the authority.

    Returns:
        Lamports reclaimed.
    """
    config = load_split_config(ledger, program.program_id, config_address)
    _require_authority(config, authority)
    _require_vault(config, vault)
    if config.unclaimed_amounts:
        raise CascadepayError(
            ErrorCode.UNCLAIMED_FUNDS_EXIST, f"{len(config.unclaimed_amounts)} entries outstanding"
        )
    _require_empty_vault(ledger, config)

    reclaimed = ledger.close_token_account_signed(
        vault, authority, program.program_id, signer_seeds(config)
    )
    reclaimed += ledger.close_account(config_address, authority, program.program_id)

    ledger.emit(
        SplitConfigClosed(
            config=config_address,
            authority=authority,
            rent_reclaimed=reclaimed,
            timestamp=ledger.unix_timestamp(),
        )
    )
    logger.info("Closed split config %s, reclaimed %d lamports", config_address, reclaimed)
    return reclaimed
