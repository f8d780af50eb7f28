"""
Tuiter Backend — Account Service
==================================

What:  Business rules shared by the user and authentication routes:
       unique usernames, password hashing on the way in, credential checks.
Who:   Called by tuiter.routes.users and tuiter.routes.auth.

Error Handling:
    Rule violations raise ConflictError / InvalidCredentialsError /
    NotFoundError. Store failures propagate unchanged as StoreError.
"""

import logging
import uuid
from typing import Any, Dict

from tuiter.exceptions import ConflictError, InvalidCredentialsError, NotFoundError
from tuiter.models.user import User
from tuiter.schemas.user import Credentials, UserCreate, UserUpdate
from tuiter.services.auth import hash_password, verify_password
from tuiter.stores import Stores

logger = logging.getLogger(__name__)


async def register_user(stores: Stores, data: UserCreate) -> User:
    """
    Create a user after checking that the username is free.

    The check and the insert are separate round trips; a concurrent
    registration of the same name is still stopped by the unique
    constraint, which the store reports as ConflictError too.
    """
    if await stores.users.find_by_username(data.username) is not None:
        logger.info("Registration rejected, username taken: %s", data.username)
        raise ConflictError(context={"username": data.username})

    values = data.model_dump(mode="python")
    values["password"] = await hash_password(data.password)
    values["marital_status"] = data.marital_status.value
    values["role"] = data.role.value
    return await stores.users.create(values)


async def authenticate(stores: Stores, credentials: Credentials) -> User:
    user = await stores.users.find_by_username(credentials.username)
    if user is None or not await verify_password(credentials.password, user.password):
        logger.info("Failed login for %s", credentials.username)
        raise InvalidCredentialsError(context={"username": credentials.username})
    return user


async def update_user(stores: Stores, user_id: uuid.UUID, data: UserUpdate) -> User:
    """
    Apply a partial update.

    Rules:
        - The username may stay the same or change to one nobody else holds
        - A new password is hashed before it is stored

    Raises:
        NotFoundError: no such user
        ConflictError: the requested username belongs to another user
    """
    existing = await stores.users.find_by_id(user_id)
    if existing is None:
        raise NotFoundError(resource="user", resource_id=str(user_id))

    changes: Dict[str, Any] = data.model_dump(mode="python", exclude_unset=True)
    # Columns are NOT NULL; an explicit null means "leave unchanged"
    for field in ("username", "password", "email", "marital_status", "role"):
        if changes.get(field, "") is None:
            changes.pop(field)

    new_username = changes.get("username")
    if new_username is not None and new_username != existing.username:
        holder = await stores.users.find_by_username(new_username)
        if holder is not None:
            raise ConflictError(context={"username": new_username})

    if "password" in changes:
        changes["password"] = await hash_password(changes["password"])
    for field in ("marital_status", "role"):
        if field in changes:
            changes[field] = changes[field].value

    updated = await stores.users.update(user_id, changes)
    if updated is None:
        raise NotFoundError(resource="user", resource_id=str(user_id))
    return updated
