"""
Tuiter Backend — User Request/Response Schemas
================================================

What:  API contracts for user accounts and login credentials.

Security:
    ``UserResponse`` never carries the stored password hash; the field is
    always serialized as ``"*****"`` so clients that read it keep working.
"""

import uuid
from datetime import date, datetime
from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from tuiter.models.user import MaritalStatus, Role
from tuiter.schemas.common import CamelModel

MASKED_PASSWORD = "*****"


class Credentials(CamelModel):
    """Body of the login endpoints."""
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserCreate(CamelModel):
    """
    Body of register / signup / admin create / POST /api/users.

    ``password`` arrives in plain text and is hashed before it is stored.
    """
    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)
    email: str = Field(default="", max_length=255)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_photo: Optional[str] = None
    header_image: Optional[str] = None
    biography: Optional[str] = None
    date_of_birth: Optional[date] = None
    location: Optional[Dict[str, Any]] = None
    marital_status: MaritalStatus = MaritalStatus.SINGLE
    role: Role = Role.GENERAL


class UserUpdate(CamelModel):
    """Partial update; only fields present in the body are written."""
    username: Optional[str] = Field(default=None, min_length=1, max_length=255)
    password: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = Field(default=None, max_length=255)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_photo: Optional[str] = None
    header_image: Optional[str] = None
    biography: Optional[str] = None
    date_of_birth: Optional[date] = None
    location: Optional[Dict[str, Any]] = None
    marital_status: Optional[MaritalStatus] = None
    role: Optional[Role] = None


class UserResponse(CamelModel):
    id: uuid.UUID
    username: str
    password: str = MASKED_PASSWORD
    email: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_photo: Optional[str] = None
    header_image: Optional[str] = None
    biography: Optional[str] = None
    date_of_birth: Optional[date] = None
    location: Optional[Dict[str, Any]] = None
    marital_status: str = MaritalStatus.SINGLE.value
    role: str = Role.GENERAL.value
    joined: Optional[datetime] = None

    @field_validator("password", mode="before")
    @classmethod
    def mask_password(cls, v: Any) -> str:
        return MASKED_PASSWORD


class DeleteResult(CamelModel):
    """Outcome of a delete; mirrors the ``deletedCount`` clients already read."""
    deleted_count: int
