"""Recipients withdraw funds held for them by an earlier execution."""

import logging

from solders.pubkey import Pubkey  # type: ignore

from ..config import ProgramConfig
from ..errors import CascadepayError, ErrorCode
from ..ledger import InMemoryLedger
from .accounts import require_recipient_account
from .events import UnclaimedFundsClaimed
from .state import load_split_config, signer_seeds, store_split_config

logger = logging.getLogger(__name__)


def claim_unclaimed(
    ledger: InMemoryLedger,
    program: ProgramConfig,
    recipient: Pubkey,
    config_address: Pubkey,
    vault: Pubkey,
    recipient_ata: Pubkey,
) -> int:
    """Transfer a recipient's full unclaimed amount and drop the entry.

    The recipient must sign; their token account must now exist.

    Returns:
        Amount claimed.
    """
    config = load_split_config(ledger, program.program_id, config_address)
    if vault != config.vault:
        raise CascadepayError(ErrorCode.INVALID_VAULT, f"got {vault}, expected {config.vault}")

    entry = config.unclaimed_amounts.take(recipient)
    require_recipient_account(ledger, recipient_ata, recipient, config.mint)

    ledger.transfer_signed(vault, recipient_ata, entry.amount, program.program_id, signer_seeds(config))
    store_split_config(ledger, program.program_id, config_address, config)

    ledger.emit(
        UnclaimedFundsClaimed(
            config=config_address,
            recipient=recipient,
            amount=entry.amount,
            timestamp=ledger.unix_timestamp(),
        )
    )
    logger.info("Recipient %s claimed %d from %s", recipient, entry.amount, config_address)
    return entry.amount
