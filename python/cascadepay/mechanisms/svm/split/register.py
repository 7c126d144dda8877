"""Registration helpers for Solana split scheme.

Registries are duck-typed: clients and servers expose
``register(network, scheme)``, facilitators ``register(networks, scheme)``.
"""

from typing import Any

from cascadepay.client import CascadepayClient
from cascadepay.constants import NETWORK_CONFIGS

from ..signers import KeypairSigner
from .client import SplitSvmClient
from .facilitator import SplitSvmFacilitator
from .server import SplitSvmServer


def register_split_svm_client(
    client: Any,
    signer: KeypairSigner,
    networks: list[str] | None = None,
) -> SplitSvmClient:
    """Register Solana split scheme with a payment client.

    Args:
        client: Registry exposing register(network, scheme).
        signer: Client signer for payment authorizations.
        networks: Optional list of network patterns (defaults to ["solana:*"]).
    """
    if networks is None:
        networks = ["solana:*"]

    scheme = SplitSvmClient(signer=signer)
    for network in networks:
        client.register(network, scheme)
    return scheme


def register_split_svm_server(
    server: Any,
    networks: list[str] | None = None,
    are_fees_sponsored: bool = True,
) -> SplitSvmServer:
    """Register Solana split scheme with a resource server.

    Args:
        server: Registry exposing register(network, scheme).
        networks: Optional list of network patterns (defaults to ["solana:*"]).
        are_fees_sponsored: Whether fees are sponsored by facilitator.
    """
    if networks is None:
        networks = ["solana:*"]

    scheme = SplitSvmServer(are_fees_sponsored=are_fees_sponsored)
    for network in networks:
        server.register(network, scheme)
    return scheme


def register_split_svm_facilitator(
    facilitator: Any,
    cascadepay_client: CascadepayClient,
    networks: list[str] | None = None,
) -> SplitSvmFacilitator:
    """Register Solana split scheme with a facilitator.

    Args:
        facilitator: Registry exposing register(networks, scheme).
        cascadepay_client: Client whose wallet executes settled splits.
        networks: Optional list of networks (defaults to mainnet/devnet/testnet).
    """
    if networks is None:
        networks = list(NETWORK_CONFIGS)

    scheme = SplitSvmFacilitator(client=cascadepay_client)
    for network in networks:
        facilitator.register([network], scheme)
    return scheme
