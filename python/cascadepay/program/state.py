"""Loading and storing split config accounts."""

from solders.pubkey import Pubkey  # type: ignore

from ..constants import SPLIT_CONFIG_SEED
from ..errors import InvalidAccountDataError
from ..ledger import InMemoryLedger
from .types import SplitConfig


def load_split_config(ledger: InMemoryLedger, program_id: Pubkey, address: Pubkey) -> SplitConfig:
    """Read and decode a split config owned by the program.

    Raises:
        AccountNotFoundError: If the account does not exist.
        InvalidAccountDataError: If it is not a split config of this program.
    """
    account = ledger.require_account(address)
    if account.owner != program_id:
        raise InvalidAccountDataError(f"Account {address} is not owned by program {program_id}")
    return SplitConfig.from_bytes(account.data)


def store_split_config(ledger: InMemoryLedger, program_id: Pubkey, address: Pubkey, config: SplitConfig) -> None:
    ledger.write_data(address, program_id, config.to_bytes())


def signer_seeds(config: SplitConfig) -> list[bytes]:
    """Seeds that let the program sign for the config PDA (and so its vault)."""
    return [SPLIT_CONFIG_SEED, bytes(config.authority), bytes(config.mint), bytes([config.bump])]
