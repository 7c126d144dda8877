"""Program configuration."""

from dataclasses import dataclass

from solders.pubkey import Pubkey  # type: ignore

from .constants import PROGRAM_ID, PROTOCOL_WALLET


@dataclass(frozen=True)
class ProgramConfig:
    """Deployment-wide, read-only program settings.

    Attributes:
        program_id: Address the program is deployed at; owns every split
            config and derives every config PDA.
        protocol_wallet: Wallet whose token account receives the protocol fee.
            Never taken from instruction input.
    """

    program_id: Pubkey = PROGRAM_ID
    protocol_wallet: Pubkey = PROTOCOL_WALLET


DEFAULT_PROGRAM_CONFIG = ProgramConfig()
