"""
Tuiter Backend — Like / Dislike / Bookmark Schemas
====================================================

What:  Response contracts for join records and toggle outcomes.
"""

import enum
import uuid
from datetime import datetime
from typing import Optional

from tuiter.schemas.common import CamelModel
from tuiter.schemas.tuit import TuitResponse
from tuiter.schemas.user import UserResponse


class ToggleState(str, enum.Enum):
    """Membership of a (user, tuit) pair after a toggle."""
    PRESENT = "present"
    ABSENT = "absent"


class JoinRecordResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    tuit_id: uuid.UUID
    created_at: Optional[datetime] = None
    user: Optional[UserResponse] = None
    tuit: Optional[TuitResponse] = None


class ToggleResponse(CamelModel):
    state: ToggleState
