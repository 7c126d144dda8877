"""The cascadepay split program.

Non-custodial payment splitting: funds sent to a split config's vault are
distributed to its recipients (99%) and the protocol (1% plus rounding dust).
"""

from cascadepay.program.accounts import AccountCheck, AccountStatus
from cascadepay.program.distribution import Delivered, Held, SplitExecution
from cascadepay.program.events import (
    RecipientPaymentHeld,
    SplitConfigClosed,
    SplitConfigCreated,
    SplitConfigUpdated,
    SplitExecuted,
    UnclaimedFundsClaimed,
)
from cascadepay.program.lifecycle import validate_recipients
from cascadepay.program.processor import CascadepayProgram
from cascadepay.program.split_math import SplitAmounts, calculate_split_amounts
from cascadepay.program.types import Recipient, SplitConfig, UnclaimedAmount, UnclaimedLedger

__all__ = [
    # Program
    "CascadepayProgram",
    # State
    "Recipient",
    "SplitConfig",
    "UnclaimedAmount",
    "UnclaimedLedger",
    # Math and validation
    "SplitAmounts",
    "calculate_split_amounts",
    "validate_recipients",
    "AccountCheck",
    "AccountStatus",
    # Results
    "SplitExecution",
    "Delivered",
    "Held",
    # Events
    "SplitConfigCreated",
    "SplitConfigUpdated",
    "SplitConfigClosed",
    "SplitExecuted",
    "RecipientPaymentHeld",
    "UnclaimedFundsClaimed",
]
