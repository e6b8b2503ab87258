"""
Family Wallet Events Module.

Provides append-only sinks for registry audit events.
"""

__all__ = ["EventSink", "MemoryEventSink", "JsonlEventSink"]

from family_wallet.events.sink import EventSink, JsonlEventSink, MemoryEventSink
