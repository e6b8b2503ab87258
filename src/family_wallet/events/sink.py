"""
Event sinks for Family Wallet.

Registry events are fire-and-forget notifications published to an
append-only log. The registry never reads them back.
"""

import fcntl
import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from family_wallet.core.models import WalletEvent, WalletEventKind

logger = logging.getLogger(__name__)


class EventSink(ABC):
    """Abstract base class for event sinks."""

    @abstractmethod
    def publish(self, event: WalletEvent) -> None:
        """Append an event to the log."""


class MemoryEventSink(EventSink):
    """Keeps published events in a list."""

    def __init__(self) -> None:
        self.events: list[WalletEvent] = []
        self._lock = threading.Lock()

    def publish(self, event: WalletEvent) -> None:
        with self._lock:
            self.events.append(event)

    def of_kind(self, kind: WalletEventKind) -> list[WalletEvent]:
        with self._lock:
            return [e for e in self.events if e.kind == kind]


class JsonlEventSink(EventSink):
    """
    Thread-safe JSONL event writer.

    Writes one line per event to {audit_dir}/family_events.jsonl with
    file locking for cross-process safety.
    """

    DEFAULT_AUDIT_DIR = Path("var/audit")
    LOG_FILE = "family_events.jsonl"

    def __init__(self, audit_dir: Path | None = None):
        self._audit_dir = Path(audit_dir) if audit_dir else self.DEFAULT_AUDIT_DIR
        self._audit_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._audit_dir / self.LOG_FILE

    def publish(self, event: WalletEvent) -> None:
        log_line = event.to_log_line() + "\n"

        # Closing the file drops the flock
        with self._lock, open(self.path, "a", encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_EX)
            f.write(log_line)
            f.flush()
            os.fsync(f.fileno())

        logger.debug(f"Published {event.kind.value} for {event.identity}")

    def read_events(self) -> list[WalletEvent]:
        """Read back every event in the log, oldest first."""
        if not self.path.exists():
            return []
        events = []
        for line in self.path.read_text(encoding="utf-8").splitlines():
            if line.strip():
                events.append(WalletEvent(**json.loads(line)))
        return events
