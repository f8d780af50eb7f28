"""
Tuiter Backend — Tuit SQLAlchemy Model
========================================

What:  ORM model representing the `tuits` table (user-authored posts).

Table Design:
    - posted_by_id is nullable: a tuit snapshot may outlive its author
      reference, and every reader must cope with a missing author
    - stats is a free-form JSON bag (replies, retuits, likes, dislikes)
    - Index on posted_on DESC serves the "newest first" listings
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tuiter.database import Base
from tuiter.models.user import User


def default_stats() -> Dict[str, Any]:
    return {"replies": 0, "retuits": 0, "likes": 0, "dislikes": 0}


class Tuit(Base):
    __tablename__ = "tuits"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    tuit: Mapped[str] = mapped_column(Text, nullable=False, default="")

    posted_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    posted_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    stats: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=default_stats,
    )

    # Loaded explicitly by the stores (selectinload); sessions are closed
    # by the time a tuit is serialized
    posted_by: Mapped[Optional[User]] = relationship(User)

    __table_args__ = (
        Index("idx_tuits_posted_on", posted_on.desc()),
    )

    def __repr__(self) -> str:
        return f"<Tuit(id={self.id}, posted_by_id={self.posted_by_id})>"
