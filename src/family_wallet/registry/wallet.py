"""
Wallet Registry - owner-managed store of family members and spending limits.

State lives in an injected InstanceStore under three slots:
- OWNER: the single owner identity
- MEMBERS: identity -> member record
- ADDRS: identities in first-add order, used for enumeration

Every mutating operation runs in one store transaction, so a rejected
call leaves no partial writes. Events are published only after commit.
"""

import logging
from typing import Any

from family_wallet.auth.verifier import Caller, IdentityVerifier, as_caller
from family_wallet.core.config import LifetimePolicy
from family_wallet.core.exceptions import (
    AlreadyInitializedError,
    InvalidInputError,
    NotInitializedError,
    UnauthorizedError,
)
from family_wallet.core.models import Member, WalletEvent, WalletEventKind
from family_wallet.events.sink import EventSink, MemoryEventSink
from family_wallet.storage.store import InstanceStore

logger = logging.getLogger(__name__)

OWNER_KEY = "OWNER"
MEMBERS_KEY = "MEMBERS"
ADDRS_KEY = "ADDRS"


class WalletRegistry:
    """
    Access-controlled registry of family members.

    Lifecycle: Uninitialized -> Initialized, once, via initialize().
    Only the owner may add members or change limits; reads are open.
    """

    def __init__(
        self,
        store: InstanceStore,
        verifier: IdentityVerifier,
        events: EventSink | None = None,
        lifetime: LifetimePolicy | None = None,
    ):
        self._store = store
        self._verifier = verifier
        self._events = events or MemoryEventSink()
        self._lifetime = lifetime or LifetimePolicy()

    @property
    def owner(self) -> str | None:
        """The stored owner identity, or None when uninitialized."""
        return self._store.get(OWNER_KEY)

    def is_initialized(self) -> bool:
        return self._store.has(OWNER_KEY)

    def initialize(self, caller: Caller | str, owner_identity: str) -> bool:
        """
        Initialize the wallet with an owner.

        Raises:
            UnauthorizedError: If caller is not owner_identity or fails verification
            AlreadyInitializedError: If an owner is already stored
        """
        caller = as_caller(caller)
        self._verifier.require_auth(caller, "initialize", {"owner": owner_identity})
        if caller.identity != owner_identity:
            raise UnauthorizedError(
                "Only the owner can initialize the wallet",
                operation="initialize",
                identity=caller.identity,
            )

        with self._store.transaction():
            if self._store.has(OWNER_KEY):
                raise AlreadyInitializedError(identity=caller.identity)

            self._store.set(OWNER_KEY, owner_identity)
            self._store.set(MEMBERS_KEY, {})
            self._store.set(ADDRS_KEY, [])
            self._extend_instance_ttl()

        logger.info(f"Wallet initialized with owner {owner_identity}")
        return True

    def add_member(
        self,
        caller: Caller | str,
        identity: str,
        name: str,
        spending_limit: int,
        role: str,
    ) -> bool:
        """
        Add a family member, or update one in place if already present.

        Updating keeps the member's first-add enumeration position.

        Raises:
            UnauthorizedError: If caller fails verification or is not the owner
            NotInitializedError: If the wallet has no owner
            InvalidInputError: If spending_limit is not a positive int, or a
                text field is empty
        """
        args = {"identity": identity, "name": name, "spending_limit": spending_limit, "role": role}
        caller = self._authorize_owner(caller, "add_member", args)
        _require_text("identity", identity, "add_member")
        _require_positive_limit(spending_limit, "add_member")
        _require_text("name", name, "add_member")
        _require_text("role", role, "add_member")

        with self._store.transaction():
            members = self._store.get(MEMBERS_KEY, {})
            addresses = self._store.get(ADDRS_KEY, [])

            is_update = identity in members
            members[identity] = Member(
                identity=identity, name=name, spending_limit=spending_limit, role=role
            ).to_record()
            if not is_update:
                addresses.append(identity)

            self._store.set(MEMBERS_KEY, members)
            self._store.set(ADDRS_KEY, addresses)
            self._extend_instance_ttl()

        kind = WalletEventKind.MEMBER_UPDATED if is_update else WalletEventKind.MEMBER_ADDED
        logger.info(f"{kind.value}: {identity} by {caller.identity}")
        self._events.publish(WalletEvent(kind=kind, identity=identity))
        return True

    def get_member(self, identity: str) -> Member | None:
        """Return the member record, or None if not found."""
        record = self._store.get(MEMBERS_KEY, {}).get(identity)
        if record is None:
            return None
        return Member.model_validate(record)

    def get_all_members(self) -> list[Member]:
        """Return every member in first-add order."""
        members = self._store.get(MEMBERS_KEY, {})
        addresses = self._store.get(ADDRS_KEY, [])
        return [Member.model_validate(members[addr]) for addr in addresses if addr in members]

    def update_spending_limit(self, caller: Caller | str, identity: str, new_limit: int) -> bool:
        """
        Update the spending limit of an existing member.

        Returns:
            True if updated, False if the member was not found

        Raises:
            UnauthorizedError: If caller fails verification or is not the owner
            NotInitializedError: If the wallet has no owner
            InvalidInputError: If new_limit is not a positive int, even for unknown members
        """
        args = {"identity": identity, "new_limit": new_limit}
        caller = self._authorize_owner(caller, "update_spending_limit", args)
        _require_positive_limit(new_limit, "update_spending_limit")

        with self._store.transaction():
            self._extend_instance_ttl()
            members = self._store.get(MEMBERS_KEY, {})
            if identity not in members:
                logger.debug(f"Limit update skipped, member not found: {identity}")
                return False

            members[identity]["spending_limit"] = new_limit
            self._store.set(MEMBERS_KEY, members)

        logger.info(f"SpendingLimitUpdated: {identity} by {caller.identity}")
        self._events.publish(
            WalletEvent(kind=WalletEventKind.SPENDING_LIMIT_UPDATED, identity=identity)
        )
        return True

    def check_spending_limit(self, identity: str, amount: int) -> bool:
        """Return True if the member exists and amount is within their limit."""
        member = self.get_member(identity)
        if member is None:
            return False
        return member.allows(amount)

    def _authorize_owner(self, caller: Caller | str, operation: str, args: dict[str, Any]) -> Caller:
        """Verify the caller and require that it is the stored owner."""
        caller = as_caller(caller)
        self._verifier.require_auth(caller, operation, args)

        stored_owner = self._store.get(OWNER_KEY)
        if stored_owner is None:
            raise NotInitializedError(operation=operation)
        if stored_owner != caller.identity:
            logger.warning(f"Rejected {operation} from non-owner {caller.identity}")
            raise UnauthorizedError(
                f"Only the owner can call {operation}",
                operation=operation,
                identity=caller.identity,
            )
        return caller

    def _extend_instance_ttl(self) -> None:
        self._store.extend_ttl(self._lifetime.threshold_seconds, self._lifetime.bump_seconds)


def _require_positive_limit(limit: int, operation: str) -> None:
    # bool is an int subclass but never a valid limit
    if not isinstance(limit, int) or isinstance(limit, bool):
        raise InvalidInputError(
            "Spending limit must be an integer", field="spending_limit", operation=operation
        )
    if limit <= 0:
        raise InvalidInputError(
            "Spending limit must be positive", field="spending_limit", operation=operation
        )


def _require_text(field: str, value: str, operation: str) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidInputError(
            f"Member {field} must not be empty", field=field, operation=operation
        )
