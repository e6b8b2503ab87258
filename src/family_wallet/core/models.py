"""
Core data models for Family Wallet.

Defines member records and the events published for the audit trail.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, computed_field

EVENT_TOPIC = "family"


class WalletEventKind(str, Enum):
    """Events emitted by the registry for the audit trail."""

    MEMBER_ADDED = "MemberAdded"
    MEMBER_UPDATED = "MemberUpdated"
    SPENDING_LIMIT_UPDATED = "SpendingLimitUpdated"


class Member(BaseModel):
    """A registered family participant."""

    identity: str = Field(min_length=1, description="Caller-identifiable key")
    name: str = Field(min_length=1, description="Display label")
    spending_limit: int = Field(gt=0, description="Inclusive upper bound for a spend")
    role: str = Field(min_length=1, description="Free-text role label, e.g. parent")

    def allows(self, amount: int) -> bool:
        """Return True if amount is within this member's spending limit."""
        return amount <= self.spending_limit

    def to_record(self) -> dict[str, Any]:
        """Convert to the plain dict stored under MEMBERS."""
        return self.model_dump()


def _event_id() -> str:
    return f"evt_{uuid.uuid4().hex[:12]}"


class WalletEvent(BaseModel):
    """
    A single published registry event.

    The topic pair mirrors the namespace marker plus the event kind;
    the payload is the affected member identity.
    """

    event_id: str = Field(default_factory=_event_id)
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    kind: WalletEventKind
    identity: str

    @computed_field
    @property
    def topic(self) -> tuple[str, str]:
        """Return the (namespace, kind) topic pair."""
        return (EVENT_TOPIC, self.kind.value)

    def to_log_line(self) -> str:
        """Serialize as a single JSON line."""
        return self.model_dump_json()
