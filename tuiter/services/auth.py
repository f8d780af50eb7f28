"""
Tuiter Backend — Passwords & Session Profile
==============================================

What:  bcrypt password hashing and the helpers that read and write the
       logged-in profile kept in the signed session cookie.
How:   Hashing runs in a worker thread (bcrypt is deliberately CPU-heavy and
       would otherwise stall the event loop). The session itself is managed
       by Starlette's SessionMiddleware; this module only touches
       ``request.session["profile"]``.

Session layout:
    request.session["profile"] = UserResponse serialized with camelCase keys
    (password masked). Only "id" is trusted for lookups; everything else is
    a display cache refreshed by POST /api/auth/profile.
"""

import asyncio
import logging
import uuid
from typing import Any, Dict, Optional

import bcrypt
from starlette.requests import Request

from tuiter.config import settings
from tuiter.exceptions import NotFoundError, UnauthenticatedError
from tuiter.schemas.user import UserResponse

logger = logging.getLogger(__name__)

PROFILE_KEY = "profile"
ME = "me"


# ── Passwords ─────────────────────────────────────────────────────────────

async def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    hashed = await asyncio.to_thread(bcrypt.hashpw, password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


async def verify_password(password: str, hashed: str) -> bool:
    """Constant-time check of ``password`` against a stored bcrypt hash."""
    try:
        return await asyncio.to_thread(
            bcrypt.checkpw, password.encode("utf-8"), hashed.encode("utf-8")
        )
    except ValueError:
        # Stored value is not a bcrypt hash (e.g. legacy plain-text row)
        logger.warning("Stored password is not a valid bcrypt hash")
        return False


# ── Session profile ───────────────────────────────────────────────────────

def get_profile(request: Request) -> Optional[Dict[str, Any]]:
    return request.session.get(PROFILE_KEY)


def set_profile(request: Request, user: UserResponse) -> None:
    request.session[PROFILE_KEY] = user.model_dump(mode="json", by_alias=True)


def clear_session(request: Request) -> None:
    request.session.clear()


def session_user_id(request: Request) -> Optional[uuid.UUID]:
    """Id of the logged-in user, or None for an anonymous request."""
    profile = get_profile(request)
    if not profile or "id" not in profile:
        return None
    try:
        return uuid.UUID(str(profile["id"]))
    except ValueError:
        logger.warning("Discarding session profile with malformed id")
        return None


def require_session_user_id(request: Request) -> uuid.UUID:
    user_id = session_user_id(request)
    if user_id is None:
        raise UnauthenticatedError()
    return user_id


def resolve_user_id(uid: str, request: Request) -> uuid.UUID:
    """
    Turn a ``{uid}`` path segment into a user id.

    "me" resolves to the session user (UnauthenticatedError without a
    session); anything else must be a UUID (NotFoundError otherwise, since
    no user can have that id).
    """
    if uid == ME:
        return require_session_user_id(request)
    try:
        return uuid.UUID(uid)
    except ValueError:
        raise NotFoundError(resource="user", resource_id=uid)
