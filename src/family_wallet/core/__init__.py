"""
Family Wallet Core Module.

Provides foundational types, exceptions, and settings.
"""

__all__ = [
    "EVENT_TOPIC",
    "Member",
    "WalletEvent",
    "WalletEventKind",
    "LifetimePolicy",
    "Settings",
    "load_settings",
    # Exceptions
    "ErrorKind",
    "FamilyWalletError",
    "RegistryError",
    "AlreadyInitializedError",
    "NotInitializedError",
    "UnauthorizedError",
    "InvalidInputError",
    "StorageError",
    "StateArchivedError",
    "ConfigurationError",
]

from family_wallet.core.config import LifetimePolicy, Settings, load_settings
from family_wallet.core.exceptions import (
    AlreadyInitializedError,
    ConfigurationError,
    ErrorKind,
    FamilyWalletError,
    InvalidInputError,
    NotInitializedError,
    RegistryError,
    StateArchivedError,
    StorageError,
    UnauthorizedError,
)
from family_wallet.core.models import EVENT_TOPIC, Member, WalletEvent, WalletEventKind
