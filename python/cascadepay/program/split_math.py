"""Basis-point arithmetic for split distribution.

Shares are floored; the protocol fee is whatever the recipient shares leave
over, so it always covers the nominal 1% plus every unit of rounding dust:

    share_i      = floor(total * bps_i / 10000)
    protocol_fee = total - sum(share_i)

All intermediate values are range-checked against their on-chain widths
(u128 for products, u64 for amounts) and never clamped.
"""

import logging
from dataclasses import dataclass

from ..constants import BPS_DENOMINATOR, U64_MAX, U128_MAX
from ..errors import CascadepayError, ErrorCode
from .types import Recipient

logger = logging.getLogger(__name__)


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > U64_MAX:
        raise CascadepayError(ErrorCode.MATH_OVERFLOW, f"{a} + {b}")
    return result


def checked_sub(a: int, b: int) -> int:
    result = a - b
    if result < 0:
        raise CascadepayError(ErrorCode.MATH_UNDERFLOW, f"{a} - {b}")
    return result


def checked_mul_u128(a: int, b: int) -> int:
    result = a * b
    if result > U128_MAX:
        raise CascadepayError(ErrorCode.MATH_OVERFLOW, f"{a} * {b}")
    return result


@dataclass(frozen=True)
class SplitAmounts:
    """Allocation of a total across recipients plus the protocol fee."""

    total: int
    shares: list[tuple[Recipient, int]]
    protocol_fee: int

    @property
    def distributed_to_recipients(self) -> int:
        return sum(amount for _, amount in self.shares)


def calculate_split_amounts(total_amount: int, recipients: list[Recipient]) -> SplitAmounts:
    """Calculate per-recipient shares and the protocol fee for a total.

    Args:
        total_amount: Amount to distribute in atomic units (u64).
        recipients: Validated recipients, shares in basis points.

    Returns:
        SplitAmounts with shares in recipient order. Shares plus fee always
        equal total_amount exactly.

    Raises:
        CascadepayError: MATH_OVERFLOW or MATH_UNDERFLOW if any step would
            leave its integer width.
    """
    if total_amount < 0:
        raise CascadepayError(ErrorCode.MATH_UNDERFLOW, f"negative total {total_amount}")
    if total_amount > U64_MAX:
        raise CascadepayError(ErrorCode.MATH_OVERFLOW, f"total {total_amount} exceeds u64")

    shares: list[tuple[Recipient, int]] = []
    allocated = 0
    for recipient in recipients:
        share = checked_mul_u128(total_amount, recipient.percentage_bps) // BPS_DENOMINATOR
        if share > U64_MAX:
            raise CascadepayError(ErrorCode.MATH_OVERFLOW, f"share for {recipient.address}")
        shares.append((recipient, share))
        allocated = checked_add(allocated, share)

    protocol_fee = checked_sub(total_amount, allocated)
    logger.debug(
        "Split %d across %d recipients: allocated=%d protocol_fee=%d",
        total_amount,
        len(recipients),
        allocated,
        protocol_fee,
    )
    return SplitAmounts(total=total_amount, shares=shares, protocol_fee=protocol_fee)
