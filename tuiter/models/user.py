"""
Tuiter Backend — User SQLAlchemy Model
========================================

What:  ORM model representing the `users` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads it for migrations.
Who:   Used by UserStore and, through relationships, by tuits and join records.

Table Design:
    - UUID primary key, generated in Python so the id is known before flush
    - username is unique; registration and updates rely on that invariant
    - password holds a bcrypt hash, never plain text
    - marital_status / role are short enum-like strings (see tuiter.schemas.user)
"""

import enum
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Date, DateTime, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from tuiter.database import Base


class Role(str, enum.Enum):
    GENERAL = "GENERAL"
    ADMIN = "ADMIN"


class MaritalStatus(str, enum.Enum):
    MARRIED = "MARRIED"
    SINGLE = "SINGLE"
    WIDOWED = "WIDOWED"


class User(Base):
    """
    A registered account.

    Lifecycle:
        1. Created by register / signup / admin create (password hashed first)
        2. Updated through PUT /api/users/{uid}
        3. Deleted together with every tuit and join record it owns
           (see tuiter.stores.delete_user_cascade)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    username: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash",
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    first_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    profile_photo: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    header_image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    biography: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # {"latitude": float, "longitude": float}
    location: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    marital_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=MaritalStatus.SINGLE.value,
        server_default=text("'SINGLE'"),
    )

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=Role.GENERAL.value,
        server_default=text("'GENERAL'"),
    )

    joined: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
