"""Solana (SVM) split payment scheme.

The payer signs an authorization to pay into a cascadepay split vault; the
facilitator settles it by transferring into the vault and executing the
split in the same transaction, so recipients and the protocol are paid
atomically.
"""

from cascadepay.mechanisms.svm.split.client import SplitSvmClient
from cascadepay.mechanisms.svm.split.facilitator import SplitSvmFacilitator
from cascadepay.mechanisms.svm.split.register import (
    register_split_svm_client,
    register_split_svm_facilitator,
    register_split_svm_server,
)
from cascadepay.mechanisms.svm.split.server import SplitSvmServer
from cascadepay.mechanisms.svm.split.types import (
    SplitPaymentAuthorization,
    SvmSplitConfig,
    SvmSplitRecipient,
)

__all__ = [
    # Types
    "SvmSplitConfig",
    "SvmSplitRecipient",
    "SplitPaymentAuthorization",
    # Schemes
    "SplitSvmClient",
    "SplitSvmServer",
    "SplitSvmFacilitator",
    # Registration
    "register_split_svm_client",
    "register_split_svm_server",
    "register_split_svm_facilitator",
]
