"""
Tuiter Backend — User Route Handlers
======================================

What:  CRUD endpoints for user accounts plus the legacy login/register pair
       and the admin endpoints.

Route Inventory:
    GET    /api/users                           list users
    GET    /api/users/{uid}                     one user ("me" = session user)
    GET    /api/admin/{username}                search by username, sorted
    POST   /api/users                           create user
    POST   /api/admin                           admin create user
    POST   /api/login                           credential check (no session)
    POST   /api/register                        create user, username must be free
    PUT    /api/users/{uid}                     update user
    DELETE /api/admin/{uid}                     delete user and everything they own
    GET    /api/users/username/{username}/delete   delete by username (test helper)

Status codes:
    Duplicate username and failed login answer 403, as existing clients expect.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request

from tuiter.dependencies import get_stores
from tuiter.exceptions import NotFoundError
from tuiter.schemas.common import ErrorResponse
from tuiter.schemas.user import (
    Credentials,
    DeleteResult,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from tuiter.services import accounts
from tuiter.services.auth import resolve_user_id, session_user_id, set_profile
from tuiter.stores import Stores, delete_user_cascade

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Users"])

_FORBIDDEN = {403: {"description": "Username taken or bad credentials", "model": ErrorResponse}}
_NOT_FOUND = {404: {"description": "User not found", "model": ErrorResponse}}


@router.get("/users", response_model=List[UserResponse], summary="List all users")
async def find_all_users(stores: Stores = Depends(get_stores)) -> List[UserResponse]:
    users = await stores.users.find_all()
    return [UserResponse.model_validate(u) for u in users]


@router.get(
    "/users/{uid}",
    response_model=UserResponse,
    responses=_NOT_FOUND,
    summary="Get a user by id",
)
async def find_user_by_id(
    uid: str,
    request: Request,
    stores: Stores = Depends(get_stores),
) -> UserResponse:
    user_id = resolve_user_id(uid, request)
    user = await stores.users.find_by_id(user_id)
    if user is None:
        raise NotFoundError(resource="user", resource_id=str(user_id))
    return UserResponse.model_validate(user)


@router.get(
    "/admin/{username}",
    response_model=List[UserResponse],
    summary="Search users by username",
)
async def search_by_username(
    username: str,
    stores: Stores = Depends(get_stores),
) -> List[UserResponse]:
    users = await stores.users.search_by_username(username)
    return [UserResponse.model_validate(u) for u in users]


@router.post("/users", response_model=UserResponse, responses=_FORBIDDEN, summary="Create a user")
async def create_user(
    body: UserCreate,
    stores: Stores = Depends(get_stores),
) -> UserResponse:
    user = await accounts.register_user(stores, body)
    return UserResponse.model_validate(user)


@router.post("/admin", response_model=UserResponse, responses=_FORBIDDEN, summary="Admin: create a user")
async def admin_create_user(
    body: UserCreate,
    stores: Stores = Depends(get_stores),
) -> UserResponse:
    user = await accounts.register_user(stores, body)
    logger.info("Admin created user %s", user.username)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=UserResponse, responses=_FORBIDDEN, summary="Check credentials")
async def login(
    body: Credentials,
    stores: Stores = Depends(get_stores),
) -> UserResponse:
    user = await accounts.authenticate(stores, body)
    return UserResponse.model_validate(user)


@router.post("/register", response_model=UserResponse, responses=_FORBIDDEN, summary="Register a user")
async def register(
    body: UserCreate,
    stores: Stores = Depends(get_stores),
) -> UserResponse:
    user = await accounts.register_user(stores, body)
    return UserResponse.model_validate(user)


@router.put(
    "/users/{uid}",
    response_model=UserResponse,
    responses={**_FORBIDDEN, **_NOT_FOUND},
    summary="Update a user",
)
async def update_user(
    uid: str,
    body: UserUpdate,
    request: Request,
    stores: Stores = Depends(get_stores),
) -> UserResponse:
    user_id = resolve_user_id(uid, request)
    user = await accounts.update_user(stores, user_id, body)
    response = UserResponse.model_validate(user)

    # Keep the cached session profile in step with the stored user
    if session_user_id(request) == user_id:
        set_profile(request, response)
    return response


@router.delete("/admin/{uid}", response_model=DeleteResult, summary="Admin: delete a user")
async def admin_delete_user(
    uid: str,
    request: Request,
    stores: Stores = Depends(get_stores),
) -> DeleteResult:
    user_id = resolve_user_id(uid, request)
    deleted = await delete_user_cascade(stores, user_id)
    return DeleteResult(deleted_count=deleted)


@router.get(
    "/users/username/{username}/delete",
    response_model=DeleteResult,
    summary="Delete a user by username",
)
async def delete_user_by_username(
    username: str,
    stores: Stores = Depends(get_stores),
) -> DeleteResult:
    user = await stores.users.find_by_username(username)
    if user is None:
        return DeleteResult(deleted_count=0)
    deleted = await delete_user_cascade(stores, user.id)
    return DeleteResult(deleted_count=deleted)
