"""Validation of token accounts presented alongside a split config.

Two separate questions are asked of every target account:

- does it exist? An absent account is a soft outcome (MISSING): the caller
  holds the funds instead of failing. Only the expected wallet's associated
  token account may be absent; any other absent address is REJECTED.
- is it the right account? A present account must be an initialized token
  account, owned by the Token or Token-2022 program, for the config's mint and
  belonging to the expected wallet. Anything else is REJECTED with a specific
  error and the whole instruction must abort.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from solders.pubkey import Pubkey  # type: ignore

from ..constants import SUPPORTED_TOKEN_PROGRAMS
from ..errors import CascadepayError, ErrorCode, InvalidAccountDataError
from ..ledger import InMemoryLedger
from ..token import TokenAccount
from ..utils import derive_ata

logger = logging.getLogger(__name__)


class AccountStatus(Enum):
    VALID = "valid"
    MISSING = "missing"
    REJECTED = "rejected"


@dataclass(frozen=True)
class AccountCheck:
    """Tagged result of checking one target account."""

    status: AccountStatus
    address: Pubkey
    token_account: TokenAccount | None = None
    error: CascadepayError | None = None

    @property
    def is_valid(self) -> bool:
        return self.status is AccountStatus.VALID

    @property
    def is_missing(self) -> bool:
        return self.status is AccountStatus.MISSING

    def raise_if_rejected(self) -> None:
        if self.error is not None:
            raise self.error


def _rejected(address: Pubkey, code: ErrorCode, detail: str) -> AccountCheck:
    logger.warning("Rejected account %s: %s (%s)", address, code.label, detail)
    return AccountCheck(AccountStatus.REJECTED, address, error=CascadepayError(code, detail))


def check_recipient_account(
    ledger: InMemoryLedger,
    address: Pubkey,
    recipient: Pubkey,
    mint: Pubkey,
) -> AccountCheck:
    """Check a recipient's token account without raising."""
    account = ledger.get_account(address)
    if account is None:
        expected = derive_ata(recipient, mint, ledger.token_program_of(mint))
        if address != expected:
            return _rejected(
                address, ErrorCode.RECIPIENT_ATA_INVALID, f"absent and not the associated token account {expected}"
            )
        return AccountCheck(AccountStatus.MISSING, address)

    if account.owner not in SUPPORTED_TOKEN_PROGRAMS:
        return _rejected(address, ErrorCode.RECIPIENT_ATA_INVALID_OWNER, f"owned by {account.owner}")

    try:
        state = TokenAccount.from_bytes(account.data)
    except InvalidAccountDataError as e:
        return _rejected(address, ErrorCode.RECIPIENT_ATA_INVALID, str(e))

    if state.mint != mint:
        return _rejected(address, ErrorCode.RECIPIENT_ATA_WRONG_MINT, f"mint {state.mint}, expected {mint}")

    if state.owner != recipient:
        return _rejected(
            address, ErrorCode.RECIPIENT_ATA_WRONG_OWNER, f"owner {state.owner}, expected {recipient}"
        )

    return AccountCheck(AccountStatus.VALID, address, token_account=state)


def check_protocol_fee_account(
    ledger: InMemoryLedger,
    address: Pubkey,
    mint: Pubkey,
    protocol_wallet: Pubkey,
) -> AccountCheck:
    """Check the protocol fee token account without raising.

    The address must be the protocol wallet's associated token account for
    the mint, present or not. Every failure maps to INVALID_PROTOCOL_FEE_ACCOUNT.
    """
    expected = derive_ata(protocol_wallet, mint, ledger.token_program_of(mint))
    if address != expected:
        return _rejected(address, ErrorCode.INVALID_PROTOCOL_FEE_ACCOUNT, f"expected {expected}")

    account = ledger.get_account(address)
    if account is None:
        return AccountCheck(AccountStatus.MISSING, address)

    if account.owner not in SUPPORTED_TOKEN_PROGRAMS:
        return _rejected(address, ErrorCode.INVALID_PROTOCOL_FEE_ACCOUNT, f"owned by {account.owner}")

    try:
        state = TokenAccount.from_bytes(account.data)
    except InvalidAccountDataError as e:
        return _rejected(address, ErrorCode.INVALID_PROTOCOL_FEE_ACCOUNT, str(e))

    if state.mint != mint:
        return _rejected(address, ErrorCode.INVALID_PROTOCOL_FEE_ACCOUNT, f"mint {state.mint}, expected {mint}")

    if state.owner != protocol_wallet:
        return _rejected(
            address, ErrorCode.INVALID_PROTOCOL_FEE_ACCOUNT, f"owner {state.owner}, expected {protocol_wallet}"
        )

    return AccountCheck(AccountStatus.VALID, address, token_account=state)


def require_recipient_account(
    ledger: InMemoryLedger,
    address: Pubkey,
    recipient: Pubkey,
    mint: Pubkey,
) -> TokenAccount:
    """Check a recipient's token account where existence is mandatory.

    Raises:
        CascadepayError: RECIPIENT_ATA_DOES_NOT_EXIST, or the integrity error.
    """
    check = check_recipient_account(ledger, address, recipient, mint)
    check.raise_if_rejected()
    if check.token_account is None:
        raise CascadepayError(ErrorCode.RECIPIENT_ATA_DOES_NOT_EXIST, str(address))
    return check.token_account
