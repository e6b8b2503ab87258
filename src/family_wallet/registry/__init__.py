"""
Family Wallet Registry Module.

Provides the owner-managed member registry.
"""

__all__ = [
    "WalletRegistry",
    "OWNER_KEY",
    "MEMBERS_KEY",
    "ADDRS_KEY",
]

from family_wallet.registry.wallet import ADDRS_KEY, MEMBERS_KEY, OWNER_KEY, WalletRegistry
