"""ORM models; importing this package registers every table on Base.metadata."""

from tuiter.models.user import MaritalStatus, Role, User
from tuiter.models.tuit import Tuit
from tuiter.models.join import Bookmark, Dislike, JoinRecordMixin, Like

__all__ = [
    "Bookmark",
    "Dislike",
    "JoinRecordMixin",
    "Like",
    "MaritalStatus",
    "Role",
    "Tuit",
    "User",
]
