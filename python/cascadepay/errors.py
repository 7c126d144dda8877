"""Error types for the cascadepay program and its ledger."""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Program error codes (custom program errors start at 6000)."""

    INVALID_SPLIT_TOTAL = 6000
    INVALID_RECIPIENT_COUNT = 6001
    DUPLICATE_RECIPIENT = 6002
    ZERO_ADDRESS = 6003
    ZERO_PERCENTAGE = 6004
    VAULT_NOT_EMPTY = 6005
    INVALID_VAULT = 6006
    MATH_OVERFLOW = 6007
    MATH_UNDERFLOW = 6008
    RECIPIENT_ATA_COUNT_MISMATCH = 6009
    RECIPIENT_ATA_DOES_NOT_EXIST = 6010
    RECIPIENT_ATA_INVALID = 6011
    RECIPIENT_ATA_WRONG_OWNER = 6012
    RECIPIENT_ATA_WRONG_MINT = 6013
    RECIPIENT_ATA_INVALID_OWNER = 6014
    RECIPIENT_ATA_SHOULD_BE_READ_ONLY = 6015
    TOO_MANY_UNCLAIMED_ENTRIES = 6016
    INVALID_PROTOCOL_FEE_ACCOUNT = 6017
    NOTHING_TO_CLAIM = 6018
    UNCLAIMED_FUNDS_EXIST = 6019
    UNAUTHORIZED = 6020

    @property
    def label(self) -> str:
        """CamelCase name, as reported in program logs."""
        return "".join(part.capitalize() for part in self.name.split("_"))


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_SPLIT_TOTAL: "Recipients must total exactly 9900 basis points (99%)",
    ErrorCode.INVALID_RECIPIENT_COUNT: "Must have between 2 and 20 recipients",
    ErrorCode.DUPLICATE_RECIPIENT: "Duplicate recipient address detected",
    ErrorCode.ZERO_ADDRESS: "Recipient address cannot be zero",
    ErrorCode.ZERO_PERCENTAGE: "Recipient percentage cannot be zero",
    ErrorCode.VAULT_NOT_EMPTY: "Vault balance must be 0 to update or close config",
    ErrorCode.INVALID_VAULT: "Provided vault account does not match config vault",
    ErrorCode.MATH_OVERFLOW: "Math overflow occurred",
    ErrorCode.MATH_UNDERFLOW: "Math underflow occurred",
    ErrorCode.RECIPIENT_ATA_COUNT_MISMATCH: "Number of recipient ATAs passed doesn't match recipients length",
    ErrorCode.RECIPIENT_ATA_DOES_NOT_EXIST: "Recipient ATA does not exist. Create it first.",
    ErrorCode.RECIPIENT_ATA_INVALID: "Recipient account is not a valid token account",
    ErrorCode.RECIPIENT_ATA_WRONG_OWNER: "Recipient ATA has wrong owner (doesn't belong to recipient)",
    ErrorCode.RECIPIENT_ATA_WRONG_MINT: "Recipient ATA has wrong mint (not for this token)",
    ErrorCode.RECIPIENT_ATA_INVALID_OWNER: "Recipient ATA is owned by wrong program (not Token or Token-2022)",
    ErrorCode.RECIPIENT_ATA_SHOULD_BE_READ_ONLY: "Recipient ATA should be read-only during config creation",
    ErrorCode.TOO_MANY_UNCLAIMED_ENTRIES: "Too many unclaimed entries (max 20)",
    ErrorCode.INVALID_PROTOCOL_FEE_ACCOUNT: "Protocol fee account is not the protocol wallet's token account for this mint",
    ErrorCode.NOTHING_TO_CLAIM: "Recipient has no unclaimed funds to claim",
    ErrorCode.UNCLAIMED_FUNDS_EXIST: "Config still has unclaimed funds - cannot close",
    ErrorCode.UNAUTHORIZED: "Signer is not the config authority",
}


class CascadepayError(Exception):
    """Raised by program instructions. Always fatal to the whole transaction."""

    def __init__(self, code: ErrorCode, detail: str | None = None):
        self.code = code
        self.detail = detail
        message = f"{code.label} ({int(code)}): {ERROR_MESSAGES[code]}"
        if detail:
            message = f"{message} [{detail}]"
        super().__init__(message)


class LedgerError(Exception):
    """Base class for failures raised by the ledger platform itself."""


class AccountNotFoundError(LedgerError):
    pass


class AccountAlreadyExistsError(LedgerError):
    pass


class InsufficientFundsError(LedgerError):
    pass


class InvalidAccountDataError(LedgerError):
    pass


class MissingSignatureError(LedgerError):
    pass
