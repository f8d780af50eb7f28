"""
Tuiter Backend — Tuit Request/Response Schemas
================================================

What:  API contracts for tuits, including the decorated form returned by
       every listing endpoint.

Decorated tuits:
    ``liked_by_me``, ``disliked_by_me``, ``bookmarked_by_me`` and
    ``owned_by_me`` are viewer-relative projections computed by
    tuiter.services.annotation. They default to False and are never
    written back to the tuits table.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field

from tuiter.schemas.common import CamelModel
from tuiter.schemas.user import UserResponse


class TuitCreate(CamelModel):
    tuit: str = Field(min_length=1)
    posted_on: Optional[datetime] = None
    stats: Optional[Dict[str, Any]] = None


class TuitUpdate(CamelModel):
    tuit: Optional[str] = Field(default=None, min_length=1)
    stats: Optional[Dict[str, Any]] = None


class TuitResponse(CamelModel):
    id: uuid.UUID
    tuit: str
    posted_on: datetime
    posted_by: Optional[UserResponse] = None
    stats: Dict[str, Any] = Field(default_factory=dict)

    liked_by_me: bool = False
    disliked_by_me: bool = False
    bookmarked_by_me: bool = False
    owned_by_me: bool = False
