"""Solana (SVM) payment mechanisms."""

from cascadepay.mechanisms.svm.signers import KeypairSigner

__all__ = ["KeypairSigner"]
