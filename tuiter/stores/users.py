"""
Tuiter Backend — User Store
=============================

What:  Persistence operations for the `users` table.
Who:   Called by the user and authentication routes and by the cascading delete.

Passwords reach this store already hashed; it never sees plain text.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select

from tuiter.models.user import User
from tuiter.stores.base import BaseStore

logger = logging.getLogger(__name__)


class UserStore(BaseStore):

    async def find_all(self) -> List[User]:
        async with self._transaction("users.find_all") as session:
            result = await session.execute(select(User).order_by(User.joined))
            return list(result.scalars().all())

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        async with self._transaction("users.find_by_id") as session:
            return await session.get(User, user_id)

    async def find_by_username(self, username: str) -> Optional[User]:
        async with self._transaction("users.find_by_username") as session:
            result = await session.execute(
                select(User).where(User.username == username)
            )
            return result.scalar_one_or_none()

    async def search_by_username(self, fragment: str) -> List[User]:
        """Case-insensitive substring match, sorted by username."""
        async with self._transaction("users.search_by_username") as session:
            result = await session.execute(
                select(User)
                .where(User.username.icontains(fragment, autoescape=True))
                .order_by(User.username)
            )
            return list(result.scalars().all())

    async def create(self, data: Dict[str, Any]) -> User:
        """
        Insert a user.

        Raises:
            ConflictError: the username is taken (unique constraint)
            StoreError: any other database failure
        """
        user = User(**data)
        async with self._transaction("users.create") as session:
            session.add(user)
            await session.flush()
        logger.info("User created: %s (%s)", user.id, user.username)
        return user

    async def update(self, user_id: uuid.UUID, changes: Dict[str, Any]) -> Optional[User]:
        """Apply ``changes`` to the user; returns None if the user is gone."""
        async with self._transaction("users.update") as session:
            user = await session.get(User, user_id)
            if user is None:
                return None
            for field, value in changes.items():
                setattr(user, field, value)
            await session.flush()
        return user

    async def delete(self, user_id: uuid.UUID) -> int:
        async with self._transaction("users.delete") as session:
            result = await session.execute(delete(User).where(User.id == user_id))
            return result.rowcount or 0
