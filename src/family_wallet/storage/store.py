"""
Instance Store - durable key-value storage with an expiring lifetime.

Every registry instance owns one store. Writes are staged inside a
transaction and only become visible (and durable) when the outermost
transaction exits cleanly; any exception restores the previous state.
"""

import copy
import fcntl
import json
import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TextIO

from family_wallet.core.exceptions import StateArchivedError, StorageError

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class InstanceStore(ABC):
    """
    Base class for instance-scoped storage.

    The lifetime is unbounded until the first renewal. After that, any
    access once the clock passes expires_at raises StateArchivedError.
    """

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or time.time
        self._lock = threading.RLock()
        self._data: dict[str, Any] = {}
        self._expires_at: float | None = None
        self._depth = 0

    @abstractmethod
    def _commit(self) -> None:
        """Persist the current state. Called when the outermost transaction ends."""

    @property
    def expires_at(self) -> float | None:
        """Absolute clock time the state expires at, or None if never renewed."""
        return self._expires_at

    def is_live(self) -> bool:
        """Return True if the state is still accessible."""
        return self._expires_at is None or self._clock() < self._expires_at

    def _check_live(self) -> None:
        if not self.is_live():
            raise StateArchivedError(expired_at=self._expires_at)

    def has(self, key: str) -> bool:
        with self._lock:
            self._check_live()
            return key in self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Return a copy of the value stored under key."""
        with self._lock:
            self._check_live()
            if key not in self._data:
                return default
            return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        """Store a copy of value under key."""
        with self.transaction():
            self._data[key] = copy.deepcopy(value)

    def extend_ttl(self, threshold: int, extend_to: int) -> float:
        """
        Renew the lifetime if it drops below threshold.

        Args:
            threshold: Renew only when fewer than this many seconds remain
            extend_to: New lifetime in seconds, counted from now

        Returns:
            The resulting expiry time
        """
        with self.transaction():
            now = self._clock()
            remaining = None if self._expires_at is None else self._expires_at - now
            if remaining is None or remaining < threshold:
                self._expires_at = now + extend_to
                logger.debug(f"Instance lifetime extended to {self._expires_at}")
            return self._expires_at

    @contextmanager
    def transaction(self) -> Iterator["InstanceStore"]:
        """
        Stage writes and commit them on success.

        Nested transactions join the outermost one; only the outermost
        commit persists state.
        """
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                self._begin()
            try:
                self._check_live()
                snapshot = (copy.deepcopy(self._data), self._expires_at)
                self._depth += 1
                try:
                    yield self
                    if self._depth == 1:
                        self._commit()
                except BaseException:
                    self._data, self._expires_at = snapshot
                    raise
                finally:
                    self._depth -= 1
            finally:
                if outermost:
                    self._end()

    def _begin(self) -> None:
        """Hook run before the outermost transaction takes its snapshot."""

    def _end(self) -> None:
        """Hook run after the outermost transaction commits or rolls back."""


class MemoryInstanceStore(InstanceStore):
    """In-process store. State lives as long as the object."""

    def _commit(self) -> None:
        logger.debug(f"Committed {len(self._data)} keys to memory store")


class FileInstanceStore(InstanceStore):
    """
    JSON-file backed store.

    Layout:
    - {state_dir}/instance.json: {"expires_at": float | null, "data": {...}}
    - {state_dir}/instance.lock: flock held for the outermost transaction

    Each outermost transaction locks the state directory and re-reads
    instance.json, so concurrent processes serialize their writes.
    """

    STATE_FILE = "instance.json"
    LOCK_FILE = "instance.lock"

    def __init__(self, state_dir: Path | None = None, clock: Clock | None = None):
        """Initialize the store, loading existing state from disk."""
        super().__init__(clock=clock)
        self._state_dir = state_dir or Path("var/wallet")
        self._state_dir.mkdir(parents=True, exist_ok=True)
        self._lock_file: TextIO | None = None
        self._load()

    @property
    def path(self) -> Path:
        return self._state_dir / self.STATE_FILE

    def _begin(self) -> None:
        lock_file = open(self._state_dir / self.LOCK_FILE, "a", encoding="utf-8")
        try:
            fcntl.flock(lock_file, fcntl.LOCK_EX)
            self._load()
        except BaseException:
            lock_file.close()
            raise
        self._lock_file = lock_file

    def _end(self) -> None:
        if self._lock_file is not None:
            self._lock_file.close()
            self._lock_file = None

    def _load(self) -> None:
        """
        Load state from disk.

        Raises:
            StorageError: If the state file exists but cannot be parsed
        """
        if not self.path.exists():
            return
        try:
            document = json.loads(self.path.read_text())
            self._data = dict(document["data"])
            self._expires_at = document.get("expires_at")
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise StorageError(
                f"Corrupt instance state: {e}", details={"path": str(self.path)}
            ) from e
        logger.debug(f"Loaded {len(self._data)} keys from {self.path}")

    def _commit(self) -> None:
        """Persist state to disk atomically using write-replace pattern."""
        temp_path = self._state_dir / f"{self.STATE_FILE}.tmp"
        document = {"expires_at": self._expires_at, "data": self._data}

        try:
            temp_path.write_text(json.dumps(document, indent=2))
            os.replace(temp_path, self.path)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise
