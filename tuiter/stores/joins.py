"""
Tuiter Backend — Join Record Store (likes, dislikes, bookmarks)
=================================================================

What:  One store class serving the three structurally identical relation
       tables. Each instance is bound to one model class.
Who:   Used by the relation routes, the annotation aggregator
       (``find_by_pair``) and the cascading deletes.

Toggle semantics:
    toggle(user, tuit) reads the pair, then deletes it when present or
    creates it when absent. The read and the write run in separate
    transactions with no lock, so two concurrent toggles on the same pair
    can both observe the same state:

    - both see "absent": the second insert hits the (user_id, tuit_id)
      unique constraint; toggle reports PRESENT, which is the final state
    - both see "present": the second delete matches no row and is a no-op

    The final membership is therefore always well defined, but two racing
    toggles do not cancel each other out.
"""

import logging
import uuid
from typing import List, Optional, Type

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from tuiter.exceptions import ConflictError
from tuiter.models.join import JoinRecordMixin
from tuiter.models.tuit import Tuit
from tuiter.schemas.join import ToggleState
from tuiter.stores.base import BaseStore

logger = logging.getLogger(__name__)


class JoinRecordStore(BaseStore):
    """
    Store for one user-to-tuit relation.

    Attributes:
        model:    The mapped class (Like, Dislike or Bookmark)
        relation: Plural name used in logs and error context ("likes", ...)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: Type[JoinRecordMixin],
        relation: str,
    ):
        super().__init__(session_factory)
        self.model = model
        self.relation = relation

    def _select_loaded(self):
        model = self.model
        return select(model).options(
            selectinload(model.user),
            selectinload(model.tuit).selectinload(Tuit.posted_by),
        )

    # ── Point lookups ─────────────────────────────────────────────────────

    async def find_by_pair(
        self, user_id: uuid.UUID, tuit_id: uuid.UUID
    ) -> Optional[JoinRecordMixin]:
        """The record linking ``user_id`` to ``tuit_id``, or None."""
        model = self.model
        async with self._transaction(f"{self.relation}.find_by_pair") as session:
            result = await session.execute(
                select(model).where(model.user_id == user_id, model.tuit_id == tuit_id)
            )
            return result.scalar_one_or_none()

    # ── Listings ──────────────────────────────────────────────────────────

    async def find_tuits_by_user(self, user_id: uuid.UUID) -> List[JoinRecordMixin]:
        """Records owned by ``user_id`` with their tuits loaded, newest first."""
        async with self._transaction(f"{self.relation}.find_tuits_by_user") as session:
            result = await session.execute(
                self._select_loaded()
                .where(self.model.user_id == user_id)
                .order_by(self.model.created_at.desc())
            )
            return list(result.scalars().all())

    async def find_users_by_tuit(self, tuit_id: uuid.UUID) -> List[JoinRecordMixin]:
        async with self._transaction(f"{self.relation}.find_users_by_tuit") as session:
            result = await session.execute(
                self._select_loaded()
                .where(self.model.tuit_id == tuit_id)
                .order_by(self.model.created_at.desc())
            )
            return list(result.scalars().all())

    async def find_all(self) -> List[JoinRecordMixin]:
        async with self._transaction(f"{self.relation}.find_all") as session:
            result = await session.execute(
                self._select_loaded().order_by(self.model.created_at.desc())
            )
            return list(result.scalars().all())

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, user_id: uuid.UUID, tuit_id: uuid.UUID) -> JoinRecordMixin:
        """
        Insert the pair.

        Raises:
            ConflictError: the pair already exists
        """
        record = self.model(user_id=user_id, tuit_id=tuit_id)
        async with self._transaction(f"{self.relation}.create") as session:
            session.add(record)
            await session.flush()
        return record

    async def delete_by_pair(self, user_id: uuid.UUID, tuit_id: uuid.UUID) -> int:
        model = self.model
        async with self._transaction(f"{self.relation}.delete_by_pair") as session:
            result = await session.execute(
                delete(model).where(model.user_id == user_id, model.tuit_id == tuit_id)
            )
            return result.rowcount or 0

    async def delete_all_by_user(self, user_id: uuid.UUID) -> int:
        """
        Remove the user's own records and every record pointing at one of
        the user's tuits.
        """
        model = self.model
        authored = select(Tuit.id).where(Tuit.posted_by_id == user_id)
        async with self._transaction(f"{self.relation}.delete_all_by_user") as session:
            result = await session.execute(
                delete(model).where(
                    or_(model.user_id == user_id, model.tuit_id.in_(authored))
                )
            )
            return result.rowcount or 0

    async def delete_all_by_tuit(self, tuit_id: uuid.UUID) -> int:
        model = self.model
        async with self._transaction(f"{self.relation}.delete_all_by_tuit") as session:
            result = await session.execute(delete(model).where(model.tuit_id == tuit_id))
            return result.rowcount or 0

    async def toggle(self, user_id: uuid.UUID, tuit_id: uuid.UUID) -> ToggleState:
        """Flip the existence of the (user, tuit) record and return the new state."""
        existing = await self.find_by_pair(user_id, tuit_id)
        if existing is not None:
            await self.delete_by_pair(user_id, tuit_id)
            logger.info("%s: user %s removed tuit %s", self.relation, user_id, tuit_id)
            return ToggleState.ABSENT

        try:
            await self.create(user_id, tuit_id)
        except ConflictError:
            logger.info(
                "%s: concurrent insert for user %s tuit %s", self.relation, user_id, tuit_id
            )
        else:
            logger.info("%s: user %s added tuit %s", self.relation, user_id, tuit_id)
        return ToggleState.PRESENT
