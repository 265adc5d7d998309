"""
Shared test fixtures for all test modules.

Provides:
- Test environment setup (TESTING=true, no publish delay)
- A fresh in-memory store per test
- A fully wired DiaryApp over that store with a controllable clock
"""

import os

import pytest

# =============================================================================
# Test Environment Configuration
# =============================================================================

os.environ['TESTING'] = 'true'
os.environ.setdefault('OPC_PUBLISH_DELAY_SECONDS', '0')
os.environ.setdefault('OPC_POLL_INTERVAL_SECONDS', '0.01')

from opc_diary.clock import Clock  # noqa: E402
from opc_diary.config import settings  # noqa: E402
from opc_diary.dependencies import build_app  # noqa: E402
from opc_diary.kv_store import InMemoryKeyValueStore  # noqa: E402
from opc_diary.models import UserProfile  # noqa: E402

# 2024-01-01T00:00:00Z
START_MS = 1_704_067_200_000


class FrozenClock(Clock):
    """Clock pinned to a given instant; ``advance`` moves it forward."""

    def __init__(self, now_ms: int):
        super().__init__()
        self._now = now_ms

    def now_ms(self) -> int:
        return self._now

    def advance(self, ms: int) -> None:
        self._now += ms


# =============================================================================
# Store & App Fixtures
# =============================================================================

@pytest.fixture
def test_settings():
    """Settings with no artificial delays."""
    return settings.model_copy(update={"publish_delay_seconds": 0, "poll_interval_seconds": 0.01})


@pytest.fixture
def store():
    """Empty namespaced store without a quota."""
    return InMemoryKeyValueStore(namespace="opc_")


@pytest.fixture
def clock():
    return FrozenClock(START_MS)


@pytest.fixture
def app(store, test_settings, clock):
    """Services wired over the per-test store."""
    return build_app(store=store, config=test_settings, clock=clock)


@pytest.fixture
def repos(app):
    return app.repos


# =============================================================================
# Profile Fixtures
# =============================================================================

def make_profile(name: str, password: str = "pw", **extra) -> UserProfile:
    extra.setdefault("description", f"{name} Inc.")
    return UserProfile(company_name=name, password=password, **extra)


@pytest.fixture
def acme():
    return make_profile("Acme", "p1")


@pytest.fixture
def registered(app):
    """Register Alice and Bob; returns their profiles."""
    alice = make_profile("Alice")
    bob = make_profile("Bob")
    app.accounts.register(alice)
    app.accounts.register(bob)
    return alice, bob


@pytest.fixture
def profile_factory():
    """Build profiles: profile_factory("Name", "password")."""
    return make_profile
