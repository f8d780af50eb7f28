"""
Tuiter Backend — Like / Dislike / Bookmark SQLAlchemy Models
==============================================================

What:  Three structurally identical join tables linking one user to one tuit.
How:   A shared mixin declares the columns, relationships and the
       (user_id, tuit_id) unique constraint; each subclass only names its table.

Invariants:
    - At most one row per (user, tuit) in each table (unique constraint)
    - A Like and a Dislike for the same pair may coexist; nothing here
      enforces mutual exclusion between the two tables
    - Rows are removed by the inverse toggle or by cascading deletion of
      the owning user or the referenced tuit
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship

from tuiter.database import Base
from tuiter.models.tuit import Tuit
from tuiter.models.user import User


class JoinRecordMixin:
    """Columns shared by every user-to-tuit relation table."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    tuit_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tuits.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    @declared_attr
    def user(cls) -> Mapped[User]:
        return relationship(User)

    @declared_attr
    def tuit(cls) -> Mapped[Tuit]:
        return relationship(Tuit)

    @declared_attr.directive
    def __table_args__(cls):
        return (
            UniqueConstraint(
                "user_id", "tuit_id", name=f"uq_{cls.__tablename__}_user_tuit"
            ),
        )

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__}(user_id={self.user_id}, "
            f"tuit_id={self.tuit_id})>"
        )


class Like(JoinRecordMixin, Base):
    __tablename__ = "likes"


class Dislike(JoinRecordMixin, Base):
    __tablename__ = "dislikes"


class Bookmark(JoinRecordMixin, Base):
    __tablename__ = "bookmarks"
