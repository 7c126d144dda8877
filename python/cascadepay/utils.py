"""Utility functions for cascadepay address handling and networks."""

from typing import Any

from solders.pubkey import Pubkey  # type: ignore

from .constants import (
    ACCOUNT_STORAGE_OVERHEAD,
    ASSOCIATED_TOKEN_PROGRAM_ID,
    BPS_DENOMINATOR,
    LAMPORTS_PER_BYTE_YEAR,
    NETWORK_ALIASES,
    NETWORK_CONFIGS,
    PROGRAM_ID,
    PROTOCOL_WALLET,
    RENT_EXEMPTION_YEARS,
    SPLIT_CONFIG_SEED,
    TOKEN_PROGRAM_ID,
)

AddressLike = Pubkey | str


def to_pubkey(address: AddressLike) -> Pubkey:
    """Normalize a Pubkey or base58 string to a Pubkey."""
    if isinstance(address, Pubkey):
        return address
    return Pubkey.from_string(address)


def validate_svm_address(address: str) -> bool:
    """Check that a string is a base58-encoded 32-byte Solana address."""
    if not isinstance(address, str) or not 32 <= len(address) <= 44:
        return False
    try:
        Pubkey.from_string(address)
    except ValueError:
        return False
    return True


def normalize_network(network: str) -> str:
    """Normalize a network name to its CAIP-2 identifier.

    Raises:
        ValueError: If the network is not a known Solana network.
    """
    if network in NETWORK_CONFIGS:
        return network
    if network in NETWORK_ALIASES:
        return NETWORK_ALIASES[network]
    raise ValueError(f"Unsupported Solana network: {network}")


def get_network_config(network: str, rpc_url: str | None = None) -> dict[str, Any]:
    """Return the network config for a network, with an optional RPC override."""
    config = dict(NETWORK_CONFIGS[normalize_network(network)])
    if rpc_url:
        config["rpc_url"] = rpc_url
    return config


def derive_ata(
    owner: AddressLike,
    mint: AddressLike,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> Pubkey:
    """Derive the associated token account for owner and mint."""
    ata, _ = Pubkey.find_program_address(
        [bytes(to_pubkey(owner)), bytes(token_program), bytes(to_pubkey(mint))],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return ata


def derive_split_config_pda(
    authority: AddressLike,
    mint: AddressLike,
    program_id: Pubkey = PROGRAM_ID,
) -> tuple[Pubkey, int]:
    """Derive the split config PDA and bump for an authority and mint."""
    return Pubkey.find_program_address(
        [SPLIT_CONFIG_SEED, bytes(to_pubkey(authority)), bytes(to_pubkey(mint))],
        program_id,
    )


def derive_vault(
    split_config: AddressLike,
    mint: AddressLike,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> Pubkey:
    """The vault is the split config's associated token account."""
    return derive_ata(split_config, mint, token_program)


def derive_protocol_ata(
    mint: AddressLike,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
    protocol_wallet: Pubkey = PROTOCOL_WALLET,
) -> Pubkey:
    return derive_ata(protocol_wallet, mint, token_program)


def minimum_balance_for_rent_exemption(data_len: int) -> int:
    """Lamports needed to keep an account of data_len bytes rent exempt."""
    return (data_len + ACCOUNT_STORAGE_OVERHEAD) * LAMPORTS_PER_BYTE_YEAR * RENT_EXEMPTION_YEARS


def percentages_to_shares(percentages: list[float]) -> list[int]:
    """Convert recipient percentages (summing to 99) to basis points.

    Raises:
        ValueError: If the percentages do not sum to 99.
    """
    total = sum(percentages)
    if abs(total - 99) > 0.01:
        raise ValueError(f"Percentages must sum to 99% (protocol gets 1%), got {total}")
    return [round(pct / 100 * BPS_DENOMINATOR) for pct in percentages]
