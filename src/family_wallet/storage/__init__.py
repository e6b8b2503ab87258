"""
Family Wallet Storage Module.

Provides instance-scoped persistent storage with lifetime renewal.
"""

__all__ = [
    "InstanceStore",
    "MemoryInstanceStore",
    "FileInstanceStore",
]

from family_wallet.storage.store import FileInstanceStore, InstanceStore, MemoryInstanceStore
