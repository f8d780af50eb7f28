"""
Tuiter Backend — Authentication Route Handlers
================================================

What:  Session-based login, signup, profile, logout and self-delete.
How:   The logged-in user is kept as ``request.session["profile"]`` in a
       signed cookie managed by Starlette's SessionMiddleware.

Route Inventory:
    POST   /api/auth/login      verify credentials, start session
    POST   /api/auth/signup     create user, start session (alias: /register)
    POST   /api/auth/profile    current user, re-read from the database
    POST   /api/auth/logout     end session
    DELETE /api/auth/delete     delete the session user and everything they own

Missing session on profile/delete answers 403.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from tuiter.dependencies import get_stores
from tuiter.exceptions import UnauthenticatedError
from tuiter.schemas.common import ErrorResponse
from tuiter.schemas.user import Credentials, DeleteResult, UserCreate, UserResponse
from tuiter.services import accounts
from tuiter.services.auth import (
    clear_session,
    require_session_user_id,
    set_profile,
)
from tuiter.stores import Stores, delete_user_cascade

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

_FORBIDDEN = {403: {"description": "Not logged in or rejected", "model": ErrorResponse}}


@router.post("/login", response_model=UserResponse, responses=_FORBIDDEN)
async def login(
    body: Credentials,
    request: Request,
    stores: Stores = Depends(get_stores),
) -> UserResponse:
    user = await accounts.authenticate(stores, body)
    profile = UserResponse.model_validate(user)
    set_profile(request, profile)
    logger.info("User logged in: %s", user.username)
    return profile


@router.post("/signup", response_model=UserResponse, responses=_FORBIDDEN)
@router.post("/register", response_model=UserResponse, responses=_FORBIDDEN)
async def signup(
    body: UserCreate,
    request: Request,
    stores: Stores = Depends(get_stores),
) -> UserResponse:
    user = await accounts.register_user(stores, body)
    profile = UserResponse.model_validate(user)
    set_profile(request, profile)
    return profile


@router.post("/profile", response_model=UserResponse, responses=_FORBIDDEN)
async def profile(
    request: Request,
    stores: Stores = Depends(get_stores),
) -> UserResponse:
    user_id = require_session_user_id(request)
    user = await stores.users.find_by_id(user_id)
    if user is None:
        # Session outlived its user
        clear_session(request)
        raise UnauthenticatedError(context={"user_id": str(user_id)})
    current = UserResponse.model_validate(user)
    set_profile(request, current)
    return current


@router.post("/logout", status_code=200)
async def logout(request: Request) -> Response:
    clear_session(request)
    return Response(status_code=200)


@router.delete("/delete", response_model=DeleteResult, responses=_FORBIDDEN)
async def delete(
    request: Request,
    stores: Stores = Depends(get_stores),
) -> DeleteResult:
    user_id = require_session_user_id(request)
    deleted = await delete_user_cascade(stores, user_id)
    clear_session(request)
    logger.info("User %s deleted their account", user_id)
    return DeleteResult(deleted_count=deleted)
