"""
Identity verification for Family Wallet.

A verifier proves that a claimed caller identity actually authorized
the current call. The registry trusts its pass/fail result.
"""

import base64
import hashlib
import hmac
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field

from family_wallet.core.config import load_settings
from family_wallet.core.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


class Caller(BaseModel):
    """A claimed identity plus optional proof of authorization."""

    identity: str = Field(min_length=1)
    signature: str | None = None


def as_caller(caller: "Caller | str") -> Caller:
    """Accept either a Caller or a bare identity string."""
    if isinstance(caller, Caller):
        return caller
    return Caller(identity=caller)


def canonical_payload(operation: str, args: dict[str, Any]) -> str:
    """Build the exact text a caller signs for an operation."""
    return json.dumps({"operation": operation, "args": args}, sort_keys=True, separators=(",", ":"))


def _base64url_encode(data: bytes) -> str:
    """Encode bytes to base64url format."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _sign_hmac(data: str, secret: str) -> str:
    """Create HMAC-SHA256 signature."""
    hmac_obj = hmac.new(
        secret.encode("utf-8"),
        data.encode("utf-8"),
        hashlib.sha256,
    )
    return _base64url_encode(hmac_obj.digest())


class IdentityVerifier(ABC):
    """Abstract base class for identity verifiers."""

    @abstractmethod
    def verify(self, caller: Caller, operation: str, args: dict[str, Any]) -> bool:
        """Return True if caller authorized this exact call."""

    def require_auth(self, caller: Caller, operation: str, args: dict[str, Any]) -> None:
        """
        Require that caller authorized this exact call.

        Raises:
            UnauthorizedError: If verification fails
        """
        if not self.verify(caller, operation, args):
            logger.warning(f"Identity verification failed for {caller.identity} on {operation}")
            raise UnauthorizedError(
                "Caller failed identity verification",
                operation=operation,
                identity=caller.identity,
            )


class HmacIdentityVerifier(IdentityVerifier):
    """
    Verifies calls signed with per-identity shared secrets.

    The signature is HMAC-SHA256 over the canonical payload of the
    operation name and its arguments, so a signature cannot be replayed
    against different arguments.
    """

    def __init__(self, keys: dict[str, str]):
        self._keys = dict(keys)

    @classmethod
    def from_env(cls) -> "HmacIdentityVerifier":
        """Load identity keys from FW_IDENTITY_KEYS."""
        return cls(load_settings().identity_keys)

    def knows(self, identity: str) -> bool:
        return identity in self._keys

    def sign(self, identity: str, operation: str, /, **args: Any) -> Caller:
        """
        Produce a signed Caller for an operation.

        Raises:
            UnauthorizedError: If no key is configured for identity
        """
        secret = self._keys.get(identity)
        if secret is None:
            raise UnauthorizedError(
                "No signing key configured for identity",
                operation=operation,
                identity=identity,
            )
        return Caller(identity=identity, signature=_sign_hmac(canonical_payload(operation, args), secret))

    def verify(self, caller: Caller, operation: str, args: dict[str, Any]) -> bool:
        secret = self._keys.get(caller.identity)
        if secret is None or not caller.signature:
            return False
        expected = _sign_hmac(canonical_payload(operation, args), secret)
        # Constant-time comparison
        return hmac.compare_digest(expected, caller.signature)


@dataclass
class AuthRecord:
    """One authorization observed by a RecordingVerifier."""

    identity: str
    operation: str
    args: dict[str, Any]


class RecordingVerifier(IdentityVerifier):
    """
    Accepts every caller except those listed in deny, recording each check.

    Intended for tests and local tooling where signatures are not in play.
    """

    def __init__(self, deny: set[str] | None = None):
        self.deny = set(deny or ())
        self.auths: list[AuthRecord] = []

    def verify(self, caller: Caller, operation: str, args: dict[str, Any]) -> bool:
        self.auths.append(AuthRecord(caller.identity, operation, dict(args)))
        return caller.identity not in self.deny
