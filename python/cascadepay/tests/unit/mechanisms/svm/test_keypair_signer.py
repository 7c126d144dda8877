"""Tests for SVM signer implementations."""

import asyncio

from solders.keypair import Keypair

from cascadepay.mechanisms.svm import KeypairSigner


class TestKeypairSigner:
    """Test KeypairSigner client-side signer."""

    def test_address_should_return_base58_public_key(self):
        """address property should return base58 public key."""
        keypair = Keypair()
        signer = KeypairSigner(keypair)

        assert signer.address == str(keypair.pubkey())

    def test_keypair_should_return_underlying_keypair(self):
        """keypair property should return the underlying keypair."""
        keypair = Keypair()
        signer = KeypairSigner(keypair)

        assert signer.keypair is keypair

    def test_from_base58_should_create_signer_from_base58_key(self):
        """from_base58 should create signer from base58 encoded key."""
        keypair = Keypair()

        signer = KeypairSigner.from_base58(str(keypair))

        assert signer.address == str(keypair.pubkey())

    def test_from_bytes_should_create_signer_from_bytes(self):
        """from_bytes should create signer from key bytes."""
        keypair = Keypair()

        signer = KeypairSigner.from_bytes(bytes(keypair))

        assert signer.address == str(keypair.pubkey())

    def test_sign_message_should_verify_against_public_key(self):
        """Signatures should verify under the signer's public key."""
        signer = KeypairSigner(Keypair())

        pubkey = asyncio.run(signer.get_public_key())
        signature = asyncio.run(signer.sign_message(b"pay 1 USDC"))

        assert signature.verify(pubkey, b"pay 1 USDC")
        assert not signature.verify(pubkey, b"pay 2 USDC")
