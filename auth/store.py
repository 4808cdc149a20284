"""
User store interface consumed by the credential service.

A store is a key-value lookup/insert service keyed by email.  ``insert``
must be atomic insert-if-absent: when two inserts race on one email, exactly
one succeeds and the other raises ``EmailAlreadyExists``.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional, Protocol

from auth.models import Identity


class StoreError(Exception):
    """Transient I/O failure inside a store."""


class EmailAlreadyExists(StoreError):
    """``insert`` lost the race for an email that is already taken."""


class UserStore(Protocol):
    async def find_by_email(self, email: str) -> Optional[Identity]:
        ...

    async def insert(self, name: str, email: str, password_hash: str) -> str:
        ...


class InMemoryUserStore:
    """Process-local store, used by tests and local runs without a database."""

    def __init__(self) -> None:
        self._by_email: Dict[str, Identity] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    async def find_by_email(self, email: str) -> Optional[Identity]:
        return self._by_email.get(email)

    async def insert(self, name: str, email: str, password_hash: str) -> str:
        with self._lock:
            if email in self._by_email:
                raise EmailAlreadyExists(email)
            user_id = str(self._next_id)
            self._next_id += 1
            self._by_email[email] = Identity(
                id=user_id,
                name=name,
                email=email,
                password_hash=password_hash,
            )
        return user_id

    def __len__(self) -> int:
        return len(self._by_email)
