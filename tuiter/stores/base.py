"""
Tuiter Backend — Store Base Class
===================================

What:  Shared plumbing for every record store: one transactional session per
       call and translation of SQLAlchemy failures into application errors.
How:   ``_transaction(operation)`` wraps tuiter.database.session_scope.
       Unique-constraint violations become ConflictError; every other
       SQLAlchemy error becomes StoreError with the operation name in its
       context.
Who:   Subclassed by UserStore, TuitStore and JoinRecordStore.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tuiter.database import session_scope
from tuiter.exceptions import ConflictError, StoreError

logger = logging.getLogger(__name__)


class BaseStore:
    """
    Holds the session factory a store was constructed with.

    Stores are created once at startup (see tuiter.stores.build_stores)
    and shared by all requests; they keep no per-request state.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with session_scope(self._session_factory) as session:
                yield session
        except IntegrityError as exc:
            logger.info("%s rejected by a unique constraint", operation)
            raise ConflictError(
                message="The record already exists",
                context={"operation": operation},
            ) from exc
        except SQLAlchemyError as exc:
            logger.error("%s failed: %s", operation, str(exc))
            raise StoreError(
                context={"operation": operation, "original_error": type(exc).__name__},
            ) from exc
