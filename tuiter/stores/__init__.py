"""
Tuiter Backend — Record Stores
================================

What:  Explicit store handles for users, tuits and the three relation tables,
       plus the cascading deletes that span several of them.
How:   ``build_stores(session_factory)`` is called once by the app factory;
       the resulting ``Stores`` bundle lives on ``app.state.stores`` and is
       handed to routes through a dependency. Tests build their own bundle
       against a temporary database or substitute in-memory fakes.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tuiter.models.join import Bookmark, Dislike, Like
from tuiter.stores.joins import JoinRecordStore
from tuiter.stores.tuits import TuitStore
from tuiter.stores.users import UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stores:
    users: UserStore
    tuits: TuitStore
    likes: JoinRecordStore
    dislikes: JoinRecordStore
    bookmarks: JoinRecordStore

    def relation(self, name: str) -> JoinRecordStore:
        """Look up a relation store by its plural name ("likes", ...)."""
        return {
            "likes": self.likes,
            "dislikes": self.dislikes,
            "bookmarks": self.bookmarks,
        }[name]


def build_stores(session_factory: async_sessionmaker[AsyncSession]) -> Stores:
    return Stores(
        users=UserStore(session_factory),
        tuits=TuitStore(session_factory),
        likes=JoinRecordStore(session_factory, Like, "likes"),
        dislikes=JoinRecordStore(session_factory, Dislike, "dislikes"),
        bookmarks=JoinRecordStore(session_factory, Bookmark, "bookmarks"),
    )


async def delete_user_cascade(stores: Stores, user_id: uuid.UUID) -> int:
    """
    Delete a user together with everything that references them.

    Order:
        1. bookmarks, dislikes, likes owned by the user or pointing at the
           user's tuits
        2. the user's tuits
        3. the user

    Each step is its own transaction; a failure part-way leaves the earlier
    steps applied and the user still present, so the call can be retried.

    Returns:
        Number of user rows deleted (0 or 1).
    """
    removed = {
        "bookmarks": await stores.bookmarks.delete_all_by_user(user_id),
        "dislikes": await stores.dislikes.delete_all_by_user(user_id),
        "likes": await stores.likes.delete_all_by_user(user_id),
        "tuits": await stores.tuits.delete_all_by_user(user_id),
    }
    deleted = await stores.users.delete(user_id)
    logger.info("User %s deleted (%d) with %s", user_id, deleted, removed)
    return deleted


async def delete_tuit_cascade(stores: Stores, tuit_id: uuid.UUID) -> int:
    """Delete a tuit and every like, dislike and bookmark pointing at it."""
    for relation in (stores.likes, stores.dislikes, stores.bookmarks):
        await relation.delete_all_by_tuit(tuit_id)
    return await stores.tuits.delete(tuit_id)


__all__ = [
    "JoinRecordStore",
    "Stores",
    "TuitStore",
    "UserStore",
    "build_stores",
    "delete_tuit_cascade",
    "delete_user_cascade",
]
