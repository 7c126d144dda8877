"""Solana (SVM) facilitator implementation for the Split payment scheme.

Verifies a signed payment into a split vault and settles it by paying and
executing the split in one atomic transaction.
"""

import logging
import time
from typing import Any, Callable

from solders.pubkey import Pubkey  # type: ignore
from solders.signature import Signature  # type: ignore

from cascadepay.client import CascadepayClient
from cascadepay.errors import CascadepayError, LedgerError
from cascadepay.utils import derive_ata, normalize_network

from .constants import (
    ERR_AMOUNT_INSUFFICIENT,
    ERR_AUTHORIZATION_EXPIRED,
    ERR_INSUFFICIENT_BALANCE,
    ERR_INVALID_PAYLOAD,
    ERR_INVALID_SIGNATURE,
    ERR_MINT_MISMATCH,
    ERR_NETWORK_MISMATCH,
    ERR_NONCE_ALREADY_USED,
    ERR_NOT_SPLIT_VAULT,
    ERR_PROTOCOL_ATA_MISSING,
    ERR_RECIPIENT_MISMATCH,
    ERR_SETTLEMENT_FAILED,
    ERR_SPLIT_CONFIG_MISMATCH,
    ERR_UNSUPPORTED_SCHEME,
    SCHEME_SPLIT,
)
from .types import SplitPaymentAuthorization, SvmSplitConfig

logger = logging.getLogger(__name__)


class SplitSvmFacilitator:
    """Solana facilitator for the Split payment scheme.

    Args:
        client: Cascadepay client whose wallet executes the split.
        clock: Callable returning the current unix timestamp.
    """

    scheme = SCHEME_SPLIT

    def __init__(self, client: CascadepayClient, clock: Callable[[], float] | None = None):
        self._client = client
        self._clock = clock or time.time
        # nonce -> valid_before
        self._used_nonces: dict[str, int] = {}

    @property
    def tracked_nonces(self) -> int:
        """Number of consumed nonces whose authorizations have not yet expired."""
        return len(self._used_nonces)

    def _prune_nonces(self, now: int) -> None:
        expired = [nonce for nonce, valid_before in self._used_nonces.items() if valid_before <= now]
        for nonce in expired:
            del self._used_nonces[nonce]

    async def verify(
        self,
        payload: dict[str, Any],
        requirements: dict[str, Any],
    ) -> dict[str, Any]:
        """Verify a signed split payment.

        Args:
            payload: PaymentPayload dictionary.
            requirements: PaymentRequirements dictionary.

        Returns:
            VerifyResponse dictionary.
        """
        try:
            # 1. Validate scheme and network
            if payload.get("scheme") != SCHEME_SPLIT or requirements.get("scheme") != SCHEME_SPLIT:
                return self._invalid(ERR_UNSUPPORTED_SCHEME)

            network = normalize_network(requirements["network"])
            if normalize_network(payload.get("network", "")) != network:
                return self._invalid(ERR_NETWORK_MISMATCH)

            # 2. Parse authorization
            inner = payload.get("payload", {})
            try:
                authorization = SplitPaymentAuthorization.from_dict(inner["authorization"])
                signature = Signature.from_string(inner["signature"])
                payer = Pubkey.from_string(authorization.payer)
            except (KeyError, TypeError, ValueError) as e:
                return self._invalid(f"{ERR_INVALID_PAYLOAD}: {e}")

            payer_addr = str(payer)

            # 3. Destination must be a split vault
            pay_to = requirements["payTo"]
            detection = self._client.detect_split_vault(pay_to)
            if not detection.is_split_vault:
                return self._invalid(ERR_NOT_SPLIT_VAULT, payer_addr)

            split_config = self._parse_split_config(requirements)
            if split_config is not None and split_config.split_config != str(detection.split_config):
                return self._invalid(ERR_SPLIT_CONFIG_MISMATCH, payer_addr)
            if authorization.split_config != str(detection.split_config) or authorization.vault != pay_to:
                return self._invalid(ERR_SPLIT_CONFIG_MISMATCH, payer_addr)

            config = self._client.get_split_config(detection.split_config)
            if authorization.mint != requirements["asset"] or str(config.mint) != requirements["asset"]:
                return self._invalid(ERR_MINT_MISMATCH, payer_addr)

            # 4. Advertised recipients must match the on-chain config
            if split_config is not None:
                advertised = [(r.address, r.percentage_bps) for r in split_config.recipients]
                on_chain = [(str(r.address), r.percentage_bps) for r in config.recipients]
                if advertised != on_chain:
                    return self._invalid(ERR_RECIPIENT_MISMATCH, payer_addr)

            # 5. Amount and expiry
            expected_amount = int(requirements["amount"])
            if authorization.amount < expected_amount:
                return self._invalid(
                    f"{ERR_AMOUNT_INSUFFICIENT}: expected {expected_amount}, got {authorization.amount}",
                    payer_addr,
                )
            now = int(self._clock())
            self._prune_nonces(now)
            if authorization.valid_before <= now:
                return self._invalid(ERR_AUTHORIZATION_EXPIRED, payer_addr)
            if authorization.nonce in self._used_nonces:
                return self._invalid(ERR_NONCE_ALREADY_USED, payer_addr)

            # 6. Signature
            if not signature.verify(payer, authorization.message_bytes()):
                return self._invalid(ERR_INVALID_SIGNATURE, payer_addr)

            # 7. Payer balance
            ledger = self._client.ledger
            payer_ata = derive_ata(payer, config.mint, ledger.token_program_of(config.mint))
            balance = ledger.token_balance(payer_ata)
            if balance < authorization.amount:
                return self._invalid(
                    f"{ERR_INSUFFICIENT_BALANCE}: has {balance}, needs {authorization.amount}",
                    payer_addr,
                )

            return {
                "is_valid": True,
                "payer": payer_addr,
            }

        except Exception as e:
            return self._invalid(f"unexpected_verify_error: {e}")

    async def settle(
        self,
        payload: dict[str, Any],
        requirements: dict[str, Any],
    ) -> dict[str, Any]:
        """Settle a split payment.

        1. Verify the signed authorization
        2. Transfer into the vault and execute the split atomically

        Args:
            payload: PaymentPayload dictionary.
            requirements: PaymentRequirements dictionary.

        Returns:
            SettleResponse dictionary. ``transaction`` is the facilitator
            wallet's signature over the settled authorization, the settlement
            receipt. ``extra.authorization`` echoes the payer's signature.
        """
        network = normalize_network(requirements["network"])

        verify_result = await self.verify(payload, requirements)
        if not verify_result.get("is_valid"):
            return self._failed(
                network,
                verify_result.get("payer") or "",
                verify_result.get("invalid_reason", "verification_failed"),
            )

        payer = verify_result["payer"]
        inner = payload["payload"]
        authorization = SplitPaymentAuthorization.from_dict(inner["authorization"])
        split_config = authorization.split_config

        if not self._client.protocol_ata_exists(authorization.mint):
            return self._failed(network, payer, ERR_PROTOCOL_ATA_MISSING)

        # Consumed even if settlement fails
        self._used_nonces[authorization.nonce] = authorization.valid_before
        try:
            execution = self._client.pay_and_split(
                split_config,
                authorization.amount,
                Pubkey.from_string(payer),
                executor=self._client.wallet,
            )
        except (CascadepayError, LedgerError, ValueError) as e:
            logger.warning("Settlement of %s into %s failed: %s", payer, split_config, e)
            return self._failed(network, payer, f"{ERR_SETTLEMENT_FAILED}: {e}")

        logger.info(
            "Settled split payment of %d from %s via %s",
            authorization.amount,
            payer,
            split_config,
        )
        receipt = self._client.sign_message(authorization.message_bytes())
        return {
            "success": True,
            "transaction": str(receipt),
            "network": network,
            "payer": payer,
            "extra": {
                "authorization": inner["signature"],
                "splitConfig": split_config,
                "execution": execution.to_dict(),
            },
        }

    def _parse_split_config(self, requirements: dict[str, Any]) -> SvmSplitConfig | None:
        extra = requirements.get("extra", {})
        if isinstance(extra, dict) and "splitConfig" in extra:
            return SvmSplitConfig.from_dict(extra)
        return None

    def _invalid(self, reason: str, payer: str | None = None) -> dict[str, Any]:
        return {"is_valid": False, "invalid_reason": reason, "payer": payer}

    def _failed(self, network: str, payer: str, error: str) -> dict[str, Any]:
        return {
            "success": False,
            "transaction": "",
            "network": network,
            "payer": payer,
            "extra": {"error": error},
        }
