"""SPL token account and mint layouts.

Binary layout matches the SPL Token program's packed state. Packing and
unpacking use struct with little-endian byte order; Token-2022 accounts may
carry extension bytes after the base layout, which are ignored.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

from solders.pubkey import Pubkey  # type: ignore

from .errors import InvalidAccountDataError


class AccountState(IntEnum):
    UNINITIALIZED = 0
    INITIALIZED = 1
    FROZEN = 2


def _pubkey(data: bytes, offset: int) -> Pubkey:
    return Pubkey.from_bytes(data[offset : offset + 32])


def _pack_option_key(key: Pubkey | None) -> bytes:
    if key is None:
        return struct.pack("<I", 0) + bytes(32)
    return struct.pack("<I", 1) + bytes(key)


def _unpack_option_key(data: bytes, offset: int) -> Pubkey | None:
    (tag,) = struct.unpack_from("<I", data, offset)
    if tag == 0:
        return None
    if tag != 1:
        raise InvalidAccountDataError(f"Invalid COption tag {tag} at offset {offset}")
    return _pubkey(data, offset + 4)


@dataclass(frozen=True)
class TokenAccount:
    mint: Pubkey
    owner: Pubkey
    amount: int  # u64
    delegate: Pubkey | None = None
    state: AccountState = AccountState.INITIALIZED
    is_native: int | None = None  # u64 rent reserve for wrapped SOL
    delegated_amount: int = 0  # u64
    close_authority: Pubkey | None = None

    STRUCT_SIZE = 165

    def to_bytes(self) -> bytes:
        buf = bytearray()
        buf += bytes(self.mint)
        buf += bytes(self.owner)
        buf += struct.pack("<Q", self.amount)
        buf += _pack_option_key(self.delegate)
        buf += struct.pack("<B", int(self.state))
        if self.is_native is None:
            buf += struct.pack("<IQ", 0, 0)
        else:
            buf += struct.pack("<IQ", 1, self.is_native)
        buf += struct.pack("<Q", self.delegated_amount)
        buf += _pack_option_key(self.close_authority)
        assert len(buf) == self.STRUCT_SIZE, f"TokenAccount byte coverage: {len(buf)} != {self.STRUCT_SIZE}"
        return bytes(buf)

    @classmethod
    def from_bytes(cls, data: bytes) -> TokenAccount:
        """Decode a token account.

        Raises:
            InvalidAccountDataError: If the data is not an initialized token account.
        """
        if len(data) < cls.STRUCT_SIZE:
            raise InvalidAccountDataError(
                f"Token account data too short: {len(data)} < {cls.STRUCT_SIZE}"
            )
        mint = _pubkey(data, 0)
        owner = _pubkey(data, 32)
        (amount,) = struct.unpack_from("<Q", data, 64)
        delegate = _unpack_option_key(data, 72)
        state_raw = data[108]
        try:
            state = AccountState(state_raw)
        except ValueError as e:
            raise InvalidAccountDataError(f"Invalid token account state {state_raw}") from e
        if state == AccountState.UNINITIALIZED:
            raise InvalidAccountDataError("Token account is not initialized")
        native_tag, native_value = struct.unpack_from("<IQ", data, 109)
        if native_tag not in (0, 1):
            raise InvalidAccountDataError(f"Invalid COption tag {native_tag} at offset 109")
        (delegated_amount,) = struct.unpack_from("<Q", data, 121)
        close_authority = _unpack_option_key(data, 129)
        return cls(
            mint=mint,
            owner=owner,
            amount=amount,
            delegate=delegate,
            state=state,
            is_native=native_value if native_tag else None,
            delegated_amount=delegated_amount,
            close_authority=close_authority,
        )


@dataclass(frozen=True)
class Mint:
    mint_authority: Pubkey | None
    supply: int  # u64
    decimals: int  # u8
    is_initialized: bool = True
    freeze_authority: Pubkey | None = None

    STRUCT_SIZE = 82

    def to_bytes(self) -> bytes:
        buf = bytearray()
        buf += _pack_option_key(self.mint_authority)
        buf += struct.pack("<QB?", self.supply, self.decimals, self.is_initialized)
        buf += _pack_option_key(self.freeze_authority)
        assert len(buf) == self.STRUCT_SIZE, f"Mint byte coverage: {len(buf)} != {self.STRUCT_SIZE}"
        return bytes(buf)

    @classmethod
    def from_bytes(cls, data: bytes) -> Mint:
        if len(data) < cls.STRUCT_SIZE:
            raise InvalidAccountDataError(f"Mint data too short: {len(data)} < {cls.STRUCT_SIZE}")
        mint_authority = _unpack_option_key(data, 0)
        supply, decimals, is_initialized = struct.unpack_from("<QB?", data, 36)
        if not is_initialized:
            raise InvalidAccountDataError("Mint is not initialized")
        freeze_authority = _unpack_option_key(data, 46)
        return cls(mint_authority, supply, decimals, is_initialized, freeze_authority)
