"""Keypair signers for Solana payment schemes."""

from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.signature import Signature  # type: ignore


class KeypairSigner:
    """Client signer backed by an in-process keypair."""

    def __init__(self, keypair: Keypair):
        self._keypair = keypair

    @classmethod
    def from_base58(cls, secret: str) -> "KeypairSigner":
        return cls(Keypair.from_base58_string(secret))

    @classmethod
    def from_bytes(cls, secret: bytes) -> "KeypairSigner":
        return cls(Keypair.from_bytes(secret))

    @property
    def address(self) -> str:
        return str(self._keypair.pubkey())

    @property
    def keypair(self) -> Keypair:
        return self._keypair

    async def get_public_key(self) -> Pubkey:
        return self._keypair.pubkey()

    async def sign_message(self, message: bytes) -> Signature:
        return self._keypair.sign_message(message)
