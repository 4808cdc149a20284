"""
Shared fixtures: a fast bcrypt hasher, a pinned clock and an in-memory store.
"""

import pytest

from auth.password import PasswordHasher
from auth.service import CredentialService
from auth.store import InMemoryUserStore
from auth.tokens import TokenIssuer, TokenVerifier

SECRET = "test-signing-secret-0123456789abcdef"
T0 = 1_700_000_000
WEEK = 86400 * 7


class FakeClock:
    def __init__(self, now: float = T0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def hasher():
    # 4 is the bcrypt minimum; keeps the suite fast.
    return PasswordHasher(rounds=4)


@pytest.fixture
def issuer(clock):
    return TokenIssuer(SECRET, expiry_seconds=WEEK, clock=clock)


@pytest.fixture
def verifier(clock):
    return TokenVerifier(SECRET, clock=clock)


@pytest.fixture
def store():
    return InMemoryUserStore()


@pytest.fixture
def service(store, hasher, issuer, verifier):
    return CredentialService(store=store, hasher=hasher, issuer=issuer, verifier=verifier)
