"""Solana (SVM) client implementation for the Split payment scheme.

Signs an authorization for the payer's transfer into the split vault.
"""

import secrets
import time
from typing import Any

from cascadepay.utils import normalize_network, validate_svm_address

from ..signers import KeypairSigner
from .constants import DEFAULT_TIMEOUT_SECONDS, SCHEME_SPLIT
from .types import SplitPaymentAuthorization


class SplitSvmClient:
    """Solana client for the Split payment scheme."""

    scheme = SCHEME_SPLIT

    def __init__(self, signer: KeypairSigner):
        self._signer = signer

    async def create_payment_payload(
        self,
        requirements: dict[str, Any],
    ) -> dict[str, Any]:
        """Create a payment payload for a split payment.

        Args:
            requirements: PaymentRequirements dictionary.

        Returns:
            PaymentPayload dictionary with the signed authorization.

        Raises:
            ValueError: If validation fails.
        """
        network = normalize_network(requirements["network"])
        asset = requirements["asset"]
        pay_to = requirements["payTo"]
        amount = int(requirements["amount"])
        extra = requirements.get("extra", {})
        split_config = extra.get("splitConfig", "")

        if not validate_svm_address(asset):
            raise ValueError(f"Invalid SPL token mint: {asset}")
        if not validate_svm_address(pay_to):
            raise ValueError(f"Invalid split vault address: {pay_to}")
        if not validate_svm_address(split_config):
            raise ValueError(f"Invalid split config address: {split_config}")

        payer = str(await self._signer.get_public_key())
        timeout = int(requirements.get("maxTimeoutSeconds", DEFAULT_TIMEOUT_SECONDS))

        authorization = SplitPaymentAuthorization(
            payer=payer,
            split_config=split_config,
            vault=pay_to,
            mint=asset,
            amount=amount,
            nonce=secrets.token_hex(16),
            valid_before=int(time.time()) + timeout,
        )
        signature = await self._signer.sign_message(authorization.message_bytes())

        return {
            "scheme": SCHEME_SPLIT,
            "network": network,
            "payload": {
                "authorization": authorization.to_dict(),
                "signature": str(signature),
            },
        }
