"""
PostgreSQL-backed user store.

Email uniqueness is enforced by the ``UNIQUE`` constraint on
``users.email``; ``insert`` uses ``INSERT … ON CONFLICT DO NOTHING
RETURNING`` so a lost race comes back as an empty result instead of an
aborted transaction.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth.models import Identity
from auth.store import EmailAlreadyExists, StoreError
from database.models import User

logger = logging.getLogger(__name__)


def _to_identity(user: User) -> Identity:
    return Identity(
        id=str(user.user_id),
        name=user.name,
        email=user.email,
        password_hash=user.password_hash,
    )


class SqlUserStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_email(self, email: str) -> Optional[Identity]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(User).where(User.email == email)
                )
                user = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError("lookup failed") from exc
        return _to_identity(user) if user is not None else None

    async def insert(self, name: str, email: str, password_hash: str) -> str:
        stmt = (
            pg_insert(User)
            .values(name=name, email=email, password_hash=password_hash)
            .on_conflict_do_nothing(index_elements=["email"])
            .returning(User.user_id)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                user_id = result.scalar_one_or_none()
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError("insert failed") from exc

        if user_id is None:
            raise EmailAlreadyExists(email)
        logger.debug("Inserted user row %s", user_id)
        return str(user_id)
