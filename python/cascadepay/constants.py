"""Constants for the cascadepay split program."""

from solders.pubkey import Pubkey  # type: ignore
from spl.token.constants import (  # type: ignore
    ASSOCIATED_TOKEN_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)

# Program identity
PROGRAM_ID = Pubkey.from_string("Bi1y2G3hteJwbeQk7QAW9Uk7Qq2h9bPbDYhPCKSuE2W2")
PROTOCOL_WALLET = Pubkey.from_string("2zMEvEkyQKTRjiGkwYPXjPsJUp8eR1rVjoYQ7PzVVZnP")

# PDA seeds
SPLIT_CONFIG_SEED = b"split_config"

# Schema
SPLIT_CONFIG_VERSION = 1

# Basis points
BPS_DENOMINATOR = 10_000
PROTOCOL_FEE_BPS = 100
REQUIRED_SPLIT_TOTAL = BPS_DENOMINATOR - PROTOCOL_FEE_BPS  # 9900

# Capacity
MIN_RECIPIENTS = 2
MAX_RECIPIENTS = 20
MAX_UNCLAIMED_ENTRIES = 20

# Integer widths
U64_MAX = (1 << 64) - 1
U128_MAX = (1 << 128) - 1
I64_MIN = -(1 << 63)
I64_MAX = (1 << 63) - 1

# Token programs accepted as owners of recipient/fee token accounts
SUPPORTED_TOKEN_PROGRAMS = (TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID)

# Rent (lamports per byte-year, two years for exemption, 128 bytes account overhead)
LAMPORTS_PER_BYTE_YEAR = 3480
RENT_EXEMPTION_YEARS = 2
ACCOUNT_STORAGE_OVERHEAD = 128

LAMPORTS_PER_SOL = 1_000_000_000

# Default token decimals (USDC)
DEFAULT_DECIMALS = 6

# CAIP-2 network identifiers
SOLANA_MAINNET_CAIP2 = "solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp"
SOLANA_DEVNET_CAIP2 = "solana:EtWTRABZaYq6iMfeYKouRu166VU2xqa1"
SOLANA_TESTNET_CAIP2 = "solana:4uhcVJyU9pJkvQyS88uRDiswHXSCkY3z"

# Legacy network names accepted by normalize_network
NETWORK_ALIASES = {
    "solana": SOLANA_MAINNET_CAIP2,
    "solana-mainnet": SOLANA_MAINNET_CAIP2,
    "solana-devnet": SOLANA_DEVNET_CAIP2,
    "solana-testnet": SOLANA_TESTNET_CAIP2,
}

NETWORK_CONFIGS = {
    SOLANA_MAINNET_CAIP2: {
        "name": "mainnet-beta",
        "rpc_url": "https://api.mainnet-beta.solana.com",
        "usdc_mint": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    },
    SOLANA_DEVNET_CAIP2: {
        "name": "devnet",
        "rpc_url": "https://api.devnet.solana.com",
        "usdc_mint": "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU",
    },
    SOLANA_TESTNET_CAIP2: {
        "name": "testnet",
        "rpc_url": "https://api.testnet.solana.com",
        "usdc_mint": "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU",
    },
}

__all__ = [
    "ASSOCIATED_TOKEN_PROGRAM_ID",
    "TOKEN_2022_PROGRAM_ID",
    "TOKEN_PROGRAM_ID",
    "PROGRAM_ID",
    "PROTOCOL_WALLET",
]
