"""
Tuiter Backend — Tuit Store
=============================

What:  Persistence operations for the `tuits` table.
How:   Every read eager-loads ``posted_by`` so tuits can be serialized after
       their session has closed.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from tuiter.models.tuit import Tuit, default_stats
from tuiter.stores.base import BaseStore

logger = logging.getLogger(__name__)


def _with_author():
    return select(Tuit).options(selectinload(Tuit.posted_by))


class TuitStore(BaseStore):

    async def find_all(self) -> List[Tuit]:
        """All tuits, newest first."""
        async with self._transaction("tuits.find_all") as session:
            result = await session.execute(
                _with_author().order_by(Tuit.posted_on.desc())
            )
            return list(result.scalars().all())

    async def find_by_id(self, tuit_id: uuid.UUID) -> Optional[Tuit]:
        async with self._transaction("tuits.find_by_id") as session:
            result = await session.execute(
                _with_author().where(Tuit.id == tuit_id)
            )
            return result.scalar_one_or_none()

    async def find_by_user(self, user_id: uuid.UUID) -> List[Tuit]:
        async with self._transaction("tuits.find_by_user") as session:
            result = await session.execute(
                _with_author()
                .where(Tuit.posted_by_id == user_id)
                .order_by(Tuit.posted_on.desc())
            )
            return list(result.scalars().all())

    async def create(self, user_id: uuid.UUID, data: Dict[str, Any]) -> Tuit:
        values = {k: v for k, v in data.items() if v is not None}
        stats = default_stats()
        stats.update(values.pop("stats", {}))
        tuit = Tuit(posted_by_id=user_id, stats=stats, **values)

        async with self._transaction("tuits.create") as session:
            session.add(tuit)
            await session.flush()
            # Reload so the response carries the author
            await session.refresh(tuit, attribute_names=["posted_by"])
        logger.info("Tuit created: %s by %s", tuit.id, user_id)
        return tuit

    async def update(self, tuit_id: uuid.UUID, changes: Dict[str, Any]) -> Optional[Tuit]:
        async with self._transaction("tuits.update") as session:
            result = await session.execute(
                _with_author().where(Tuit.id == tuit_id)
            )
            tuit = result.scalar_one_or_none()
            if tuit is None:
                return None
            if "stats" in changes:
                # Merge into a new dict so the JSON column is marked dirty
                changes = dict(changes)
                changes["stats"] = {**tuit.stats, **changes["stats"]}
            for field, value in changes.items():
                setattr(tuit, field, value)
            await session.flush()
        return tuit

    async def delete(self, tuit_id: uuid.UUID) -> int:
        async with self._transaction("tuits.delete") as session:
            result = await session.execute(delete(Tuit).where(Tuit.id == tuit_id))
            return result.rowcount or 0

    async def delete_all_by_user(self, user_id: uuid.UUID) -> int:
        async with self._transaction("tuits.delete_all_by_user") as session:
            result = await session.execute(
                delete(Tuit).where(Tuit.posted_by_id == user_id)
            )
            return result.rowcount or 0
