"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from family_wallet.auth.verifier import RecordingVerifier
from family_wallet.core.config import LifetimePolicy
from family_wallet.events.sink import MemoryEventSink
from family_wallet.registry.wallet import WalletRegistry
from family_wallet.storage.store import MemoryInstanceStore

OWNER = "GOWNER"


class FakeClock:
    """Manually advanced clock for lifetime tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> MemoryInstanceStore:
    return MemoryInstanceStore(clock=clock)


@pytest.fixture
def verifier() -> RecordingVerifier:
    """Accept-all verifier, the equivalent of mocking every authorization."""
    return RecordingVerifier()


@pytest.fixture
def events() -> MemoryEventSink:
    return MemoryEventSink()


@pytest.fixture
def lifetime() -> LifetimePolicy:
    return LifetimePolicy(threshold_seconds=100, bump_seconds=1_000)


@pytest.fixture
def registry(
    store: MemoryInstanceStore,
    verifier: RecordingVerifier,
    events: MemoryEventSink,
    lifetime: LifetimePolicy,
) -> WalletRegistry:
    return WalletRegistry(store=store, verifier=verifier, events=events, lifetime=lifetime)


@pytest.fixture
def wallet(registry: WalletRegistry) -> WalletRegistry:
    """A registry already initialized with OWNER."""
    registry.initialize(OWNER, OWNER)
    return registry
