"""cascadepay: non-custodial payment splitting on Solana.

Payments land in a vault owned by a split config; anyone can execute the
split, which pays every recipient its basis-point share and the protocol its
1% fee. Recipients without a token account have their share held until they
claim it.
"""

from cascadepay.client import CascadepayClient, DetectionResult, ExecutionPreview
from cascadepay.config import DEFAULT_PROGRAM_CONFIG, ProgramConfig
from cascadepay.errors import CascadepayError, ErrorCode, LedgerError
from cascadepay.ledger import InMemoryLedger
from cascadepay.program import (
    CascadepayProgram,
    Recipient,
    SplitConfig,
    SplitExecution,
    UnclaimedAmount,
    calculate_split_amounts,
)
from cascadepay.utils import (
    derive_ata,
    derive_protocol_ata,
    derive_split_config_pda,
    derive_vault,
    percentages_to_shares,
)

__version__ = "0.1.0"

__all__ = [
    "CascadepayClient",
    "CascadepayProgram",
    "InMemoryLedger",
    "ProgramConfig",
    "DEFAULT_PROGRAM_CONFIG",
    "DetectionResult",
    "ExecutionPreview",
    "Recipient",
    "SplitConfig",
    "SplitExecution",
    "UnclaimedAmount",
    "calculate_split_amounts",
    "CascadepayError",
    "ErrorCode",
    "LedgerError",
    "derive_ata",
    "derive_protocol_ata",
    "derive_split_config_pda",
    "derive_vault",
    "percentages_to_shares",
]
