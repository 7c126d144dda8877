"""In-memory ledger platform hosting the cascadepay program.

Models the parts of an account-based ledger the program relies on: account
storage with rent, SPL token accounts and mints, token transfers, program
derived address signing, a clock and an append-only program log. Every
mutation runs inside a transaction; a failed transaction leaves no trace.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, Sequence

from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.system_program import ID as SYSTEM_PROGRAM_ID  # type: ignore

from .constants import SUPPORTED_TOKEN_PROGRAMS, TOKEN_PROGRAM_ID, U64_MAX
from .errors import (
    AccountAlreadyExistsError,
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAccountDataError,
    MissingSignatureError,
)
from .token import Mint, TokenAccount
from .utils import derive_ata, minimum_balance_for_rent_exemption

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountInfo:
    """A ledger account: lamports, the owning program and opaque data."""

    owner: Pubkey
    lamports: int
    data: bytes = b""
    executable: bool = False


class InMemoryLedger:
    """Atomic, serialized account store.

    Args:
        clock: Callable returning the current unix timestamp. Defaults to
            wall-clock seconds.
    """

    def __init__(self, clock: Callable[[], int] | None = None):
        self._accounts: dict[Pubkey, AccountInfo] = {}
        self._events: list[Any] = []
        self._clock = clock or (lambda: int(time.time()))
        self._lock = threading.RLock()
        self._depth = 0

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[InMemoryLedger]:
        """Run a block atomically.

        Transactions are serialized. Nested blocks join the outermost one, so
        only the outermost block commits or rolls back.
        """
        with self._lock:
            if self._depth > 0:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            saved_accounts = dict(self._accounts)
            saved_events = len(self._events)
            self._depth = 1
            try:
                yield self
            except BaseException:
                self._accounts = saved_accounts
                del self._events[saved_events:]
                logger.debug("Transaction rolled back")
                raise
            finally:
                self._depth = 0

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def get_account(self, address: Pubkey) -> AccountInfo | None:
        return self._accounts.get(address)

    def account_exists(self, address: Pubkey) -> bool:
        return address in self._accounts

    def require_account(self, address: Pubkey) -> AccountInfo:
        account = self._accounts.get(address)
        if account is None:
            raise AccountNotFoundError(f"Account {address} does not exist")
        return account

    def put_account(self, address: Pubkey, account: AccountInfo) -> None:
        """Store an account verbatim, bypassing ownership rules."""
        with self.transaction():
            self._accounts[address] = account

    def lamports(self, address: Pubkey) -> int:
        account = self._accounts.get(address)
        return account.lamports if account else 0

    def airdrop(self, address: Pubkey, lamports: int) -> None:
        with self.transaction():
            account = self._accounts.get(address)
            if account is None:
                self._accounts[address] = AccountInfo(owner=SYSTEM_PROGRAM_ID, lamports=lamports)
            else:
                self._accounts[address] = replace(account, lamports=account.lamports + lamports)

    def create_account(
        self,
        address: Pubkey,
        owner: Pubkey,
        space: int,
        payer: Pubkey | None,
        data: bytes = b"",
    ) -> AccountInfo:
        """Allocate a rent-exempt account of `space` bytes owned by `owner`.

        The payer is debited the rent-exempt minimum. Without a payer the
        lamports are credited out of band (genesis-style test setup).
        """
        with self.transaction():
            if address in self._accounts:
                raise AccountAlreadyExistsError(f"Account {address} already in use")
            if len(data) > space:
                raise InvalidAccountDataError(f"Data ({len(data)} bytes) exceeds space {space}")
            rent = minimum_balance_for_rent_exemption(space)
            if payer is not None:
                self._debit_lamports(payer, rent)
            account = AccountInfo(owner=owner, lamports=rent, data=data.ljust(space, b"\x00"))
            self._accounts[address] = account
            return account

    def write_data(self, address: Pubkey, program_id: Pubkey, data: bytes) -> None:
        """Overwrite an account's data. Only the owning program may write."""
        with self.transaction():
            account = self.require_account(address)
            if account.owner != program_id:
                raise MissingSignatureError(
                    f"Program {program_id} cannot write account {address} owned by {account.owner}"
                )
            if len(data) > len(account.data):
                raise InvalidAccountDataError(
                    f"Data ({len(data)} bytes) exceeds allocated {len(account.data)} bytes"
                )
            self._accounts[address] = replace(account, data=data.ljust(len(account.data), b"\x00"))

    def close_account(self, address: Pubkey, destination: Pubkey, program_id: Pubkey) -> int:
        """Delete a program-owned account, moving its lamports to destination."""
        with self.transaction():
            account = self.require_account(address)
            if account.owner != program_id:
                raise MissingSignatureError(
                    f"Program {program_id} cannot close account {address} owned by {account.owner}"
                )
            del self._accounts[address]
            self._credit_lamports(destination, account.lamports)
            return account.lamports

    def _debit_lamports(self, address: Pubkey, lamports: int) -> None:
        account = self._accounts.get(address)
        if account is None or account.lamports < lamports:
            have = account.lamports if account else 0
            raise InsufficientFundsError(
                f"Account {address} has {have} lamports, needs {lamports}"
            )
        self._accounts[address] = replace(account, lamports=account.lamports - lamports)

    def _credit_lamports(self, address: Pubkey, lamports: int) -> None:
        account = self._accounts.get(address)
        if account is None:
            self._accounts[address] = AccountInfo(owner=SYSTEM_PROGRAM_ID, lamports=lamports)
        else:
            self._accounts[address] = replace(account, lamports=account.lamports + lamports)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def create_mint(
        self,
        mint_authority: Pubkey,
        decimals: int = 6,
        token_program: Pubkey = TOKEN_PROGRAM_ID,
        payer: Pubkey | None = None,
        address: Pubkey | None = None,
    ) -> Pubkey:
        address = address or Keypair().pubkey()
        mint = Mint(mint_authority=mint_authority, supply=0, decimals=decimals)
        self.create_account(address, token_program, Mint.STRUCT_SIZE, payer, mint.to_bytes())
        return address

    def get_mint(self, address: Pubkey) -> Mint:
        account = self.require_account(address)
        if account.owner not in SUPPORTED_TOKEN_PROGRAMS:
            raise InvalidAccountDataError(f"Account {address} is not a mint")
        return Mint.from_bytes(account.data)

    def token_program_of(self, mint: Pubkey) -> Pubkey:
        """The token program that owns a mint."""
        self.get_mint(mint)
        return self._accounts[mint].owner

    def create_token_account(
        self,
        owner: Pubkey,
        mint: Pubkey,
        payer: Pubkey | None = None,
        address: Pubkey | None = None,
    ) -> Pubkey:
        """Create a token account; defaults to the owner's associated token account."""
        token_program = self.token_program_of(mint)
        address = address or derive_ata(owner, mint, token_program)
        state = TokenAccount(mint=mint, owner=owner, amount=0)
        self.create_account(address, token_program, TokenAccount.STRUCT_SIZE, payer, state.to_bytes())
        return address

    def get_token_account(self, address: Pubkey) -> TokenAccount:
        account = self.require_account(address)
        if account.owner not in SUPPORTED_TOKEN_PROGRAMS:
            raise InvalidAccountDataError(f"Account {address} is not a token account")
        return TokenAccount.from_bytes(account.data)

    def token_balance(self, address: Pubkey) -> int:
        """Balance of a token account; 0 when the account does not exist."""
        if address not in self._accounts:
            return 0
        return self.get_token_account(address).amount

    def _store_token_account(self, address: Pubkey, state: TokenAccount) -> None:
        account = self._accounts[address]
        self._accounts[address] = replace(account, data=state.to_bytes() + account.data[TokenAccount.STRUCT_SIZE:])

    def mint_to(self, mint: Pubkey, destination: Pubkey, amount: int, authority: Pubkey) -> None:
        with self.transaction():
            mint_state = self.get_mint(mint)
            if mint_state.mint_authority != authority:
                raise MissingSignatureError(f"{authority} is not the mint authority of {mint}")
            target = self.get_token_account(destination)
            if target.mint != mint:
                raise InvalidAccountDataError(f"Token account {destination} is not for mint {mint}")
            if mint_state.supply + amount > U64_MAX or target.amount + amount > U64_MAX:
                raise InvalidAccountDataError("Mint supply overflow")
            account = self._accounts[mint]
            self._accounts[mint] = replace(
                account, data=replace(mint_state, supply=mint_state.supply + amount).to_bytes()
            )
            self._store_token_account(destination, replace(target, amount=target.amount + amount))

    def transfer(self, source: Pubkey, destination: Pubkey, amount: int, signer: Pubkey) -> None:
        """Move tokens between two accounts of the same mint.

        Raises:
            MissingSignatureError: If signer does not own the source account.
            InsufficientFundsError: If the source balance is too low.
        """
        with self.transaction():
            src = self.get_token_account(source)
            dst = self.get_token_account(destination)
            if src.owner != signer:
                raise MissingSignatureError(f"{signer} is not the owner of token account {source}")
            if src.mint != dst.mint:
                raise InvalidAccountDataError(
                    f"Mint mismatch: {source} holds {src.mint}, {destination} holds {dst.mint}"
                )
            if amount < 0 or src.amount < amount:
                raise InsufficientFundsError(
                    f"Token account {source} has {src.amount}, needs {amount}"
                )
            if source == destination:
                return
            self._store_token_account(source, replace(src, amount=src.amount - amount))
            self._store_token_account(destination, replace(dst, amount=dst.amount + amount))

    def transfer_signed(
        self,
        source: Pubkey,
        destination: Pubkey,
        amount: int,
        program_id: Pubkey,
        signer_seeds: Sequence[bytes],
    ) -> None:
        """Transfer out of an account owned by a program derived address.

        The ledger re-derives the PDA from the seeds under the calling program;
        only that program can produce a matching signature.
        """
        self.transfer(source, destination, amount, self._pda_signer(program_id, signer_seeds))

    def close_token_account_signed(
        self,
        address: Pubkey,
        destination: Pubkey,
        program_id: Pubkey,
        signer_seeds: Sequence[bytes],
    ) -> int:
        """Close an empty PDA-owned token account, reclaiming its lamports."""
        return self.close_token_account(address, destination, self._pda_signer(program_id, signer_seeds))

    def close_token_account(self, address: Pubkey, destination: Pubkey, signer: Pubkey) -> int:
        """Close an empty token account. Only its owner may close it."""
        with self.transaction():
            state = self.get_token_account(address)
            if state.owner != signer:
                raise MissingSignatureError(f"{signer} is not the owner of token account {address}")
            if state.amount != 0:
                raise InvalidAccountDataError(f"Token account {address} still holds {state.amount}")
            account = self._accounts.pop(address)
            self._credit_lamports(destination, account.lamports)
            return account.lamports

    @staticmethod
    def _pda_signer(program_id: Pubkey, signer_seeds: Sequence[bytes]) -> Pubkey:
        try:
            return Pubkey.create_program_address(list(signer_seeds), program_id)
        except Exception as e:
            raise MissingSignatureError(f"Invalid signer seeds for program {program_id}") from e

    # ------------------------------------------------------------------
    # Clock and program log
    # ------------------------------------------------------------------

    def unix_timestamp(self) -> int:
        return int(self._clock())

    def emit(self, event: Any) -> None:
        with self.transaction():
            self._events.append(event)

    @property
    def events(self) -> list[Any]:
        return list(self._events)

    def events_of(self, event_type: type) -> list[Any]:
        return [e for e in self._events if isinstance(e, event_type)]
