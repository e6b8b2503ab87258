"""
Family Wallet - owner-managed registry of family members and spending limits.

A single owner adds members and sets their spending limits; any caller
can check whether an amount is within a member's limit.
"""

__version__ = "0.1.0"

# CLI is available but not exported by default
# Import explicitly: from family_wallet.cli import app

__all__ = []
