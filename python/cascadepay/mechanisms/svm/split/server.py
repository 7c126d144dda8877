"""Solana (SVM) server implementation for the Split payment scheme."""

from typing import Any

from solders.pubkey import Pubkey  # type: ignore

from cascadepay.constants import DEFAULT_DECIMALS, PROTOCOL_FEE_BPS, TOKEN_PROGRAM_ID
from cascadepay.utils import derive_vault, normalize_network, validate_svm_address

from .constants import DEFAULT_TIMEOUT_SECONDS, SCHEME_SPLIT
from .types import SvmSplitConfig, SvmSplitRecipient


class SplitSvmServer:
    """Solana server for the Split payment scheme.

    Builds payment requirements that point the payer at a split config's
    vault; distribution is then done by the program, not the facilitator.
    """

    scheme = SCHEME_SPLIT

    def __init__(self, are_fees_sponsored: bool = True):
        self._are_fees_sponsored = are_fees_sponsored

    def create_payment_requirements(
        self,
        network: str,
        split_config: str,
        asset: str,
        amount: str | int | float,
        recipients: list[dict[str, Any]],
        token_program: Pubkey = TOKEN_PROGRAM_ID,
        max_timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
        decimals: int = DEFAULT_DECIMALS,
        description: str | None = None,
    ) -> dict[str, Any]:
        """Create PaymentRequirements for a split Solana payment.

        Args:
            network: CAIP-2 network identifier (e.g., 'solana:EtWTRABZaYq6iMfeYKouRu166VU2xqa1').
            split_config: Split config address; payTo is its vault.
            asset: SPL Token mint address.
            amount: Total payment amount (numbers are human-readable, strings atomic).
            recipients: List of {address, percentageBps} dicts as stored in the config.
            token_program: Token program owning the mint.
            max_timeout_seconds: Max timeout in seconds.
            decimals: Token decimals (default 6 for USDC).
            description: Optional payment description.

        Returns:
            PaymentRequirements dictionary.

        Raises:
            ValueError: If validation fails.
        """
        try:
            network = normalize_network(network)
        except ValueError:
            raise ValueError(f"Not a Solana network: {network}")

        if not validate_svm_address(asset):
            raise ValueError(f"Invalid SPL token mint address: {asset}")

        config = SvmSplitConfig(
            split_config=split_config,
            recipients=[
                SvmSplitRecipient(address=r.get("address", ""), percentage_bps=int(r.get("percentageBps", 0)))
                for r in recipients
            ],
            protocol_fee_bps=PROTOCOL_FEE_BPS,
        )
        config.validate()

        if isinstance(amount, (int, float)):
            atomic_amount = str(int(amount * (10**decimals)))
        else:
            atomic_amount = str(amount)
        if int(atomic_amount) <= 0:
            raise ValueError(f"Amount must be positive, got {atomic_amount}")

        vault = derive_vault(split_config, asset, token_program)

        requirements: dict[str, Any] = {
            "scheme": SCHEME_SPLIT,
            "network": network,
            "amount": atomic_amount,
            "asset": asset,
            "payTo": str(vault),
            "maxTimeoutSeconds": max_timeout_seconds,
            "extra": {
                "areFeesSponsored": self._are_fees_sponsored,
                "decimals": decimals,
                **config.to_dict(),
            },
        }
        if description:
            requirements["description"] = description
        return requirements
