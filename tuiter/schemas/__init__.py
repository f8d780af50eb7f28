from tuiter.schemas.common import CamelModel, ErrorResponse, HealthResponse
from tuiter.schemas.user import (
    MASKED_PASSWORD,
    Credentials,
    DeleteResult,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from tuiter.schemas.tuit import TuitCreate, TuitResponse, TuitUpdate
from tuiter.schemas.join import JoinRecordResponse, ToggleResponse, ToggleState

__all__ = [
    "MASKED_PASSWORD",
    "CamelModel",
    "Credentials",
    "DeleteResult",
    "ErrorResponse",
    "HealthResponse",
    "JoinRecordResponse",
    "ToggleResponse",
    "ToggleState",
    "TuitCreate",
    "TuitResponse",
    "TuitUpdate",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
]
