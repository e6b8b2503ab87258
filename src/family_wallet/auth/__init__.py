"""
Family Wallet authentication module.

Provides caller identity verification.
"""

from family_wallet.auth.verifier import (
    AuthRecord,
    Caller,
    HmacIdentityVerifier,
    IdentityVerifier,
    RecordingVerifier,
    as_caller,
    canonical_payload,
)

__all__ = [
    "AuthRecord",
    "Caller",
    "HmacIdentityVerifier",
    "IdentityVerifier",
    "RecordingVerifier",
    "as_caller",
    "canonical_payload",
]
