"""Read-only access to cascadepay accounts on a Solana cluster.

These helpers decode account data with the same codecs the program uses and
never submit transactions.
"""

import logging

from solana.rpc.api import Client
from solders.pubkey import Pubkey  # type: ignore

from .client import DetectionResult
from .constants import PROGRAM_ID, PROTOCOL_WALLET, SUPPORTED_TOKEN_PROGRAMS, TOKEN_PROGRAM_ID
from .errors import InvalidAccountDataError
from .program.types import SplitConfig
from .token import TokenAccount
from .utils import AddressLike, derive_protocol_ata, get_network_config, to_pubkey

logger = logging.getLogger(__name__)


def connect(network: str, rpc_url: str | None = None) -> Client:
    """Open an RPC client for a Solana network (CAIP-2 id or legacy name)."""
    config = get_network_config(network, rpc_url)
    return Client(config["rpc_url"])


def fetch_split_config(
    client: Client,
    address: AddressLike,
    program_id: Pubkey = PROGRAM_ID,
) -> SplitConfig | None:
    """Fetch and decode a split config.

    Returns:
        The config, or None if the account does not exist.

    Raises:
        InvalidAccountDataError: If the account is not a split config owned
            by the program.
    """
    address = to_pubkey(address)
    account = client.get_account_info(address).value
    if account is None:
        return None
    if account.owner != program_id:
        raise InvalidAccountDataError(f"Account {address} is not owned by program {program_id}")
    return SplitConfig.from_bytes(bytes(account.data))


def fetch_token_balance(client: Client, address: AddressLike) -> int:
    """Token balance of an account; 0 when it does not exist."""
    account = client.get_account_info(to_pubkey(address)).value
    if account is None:
        return 0
    if account.owner not in SUPPORTED_TOKEN_PROGRAMS:
        raise InvalidAccountDataError(f"Account {address} is not a token account")
    return TokenAccount.from_bytes(bytes(account.data)).amount


def protocol_ata_exists(
    client: Client,
    mint: AddressLike,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
    protocol_wallet: Pubkey = PROTOCOL_WALLET,
) -> bool:
    ata = derive_protocol_ata(mint, token_program, protocol_wallet)
    return client.get_account_info(ata).value is not None


def detect_split_vault(
    client: Client,
    destination: AddressLike,
    program_id: Pubkey = PROGRAM_ID,
) -> DetectionResult:
    """Check whether a payment destination is a cascadepay vault.

    The destination must be a token account whose owner is a split config of
    this program, and that config must name the destination as its vault.
    """
    destination = to_pubkey(destination)
    account = client.get_account_info(destination).value
    if account is None or account.owner not in SUPPORTED_TOKEN_PROGRAMS:
        return DetectionResult(is_split_vault=False)

    try:
        owner = TokenAccount.from_bytes(bytes(account.data)).owner
        config = fetch_split_config(client, owner, program_id)
    except InvalidAccountDataError as e:
        logger.debug("%s is not a split vault: %s", destination, e)
        return DetectionResult(is_split_vault=False)

    if config is None or config.vault != destination:
        return DetectionResult(is_split_vault=False)
    return DetectionResult(is_split_vault=True, split_config=owner)
