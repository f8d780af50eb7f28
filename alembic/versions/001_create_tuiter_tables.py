"""Create users, tuits, likes, dislikes and bookmarks tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

Rollback: downgrade() drops all five tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JOIN_TABLES = ("likes", "dislikes", "bookmarks")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=False, comment="bcrypt hash"),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(255), nullable=True),
        sa.Column("last_name", sa.String(255), nullable=True),
        sa.Column("profile_photo", sa.String(1024), nullable=True),
        sa.Column("header_image", sa.String(1024), nullable=True),
        sa.Column("biography", sa.Text(), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("location", sa.JSON(), nullable=True),
        sa.Column(
            "marital_status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'SINGLE'"),
        ),
        sa.Column(
            "role",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'GENERAL'"),
        ),
        sa.Column(
            "joined",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "tuits",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tuit", sa.Text(), nullable=False),
        sa.Column(
            "posted_on",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("posted_by_id", sa.Uuid(), nullable=True),
        sa.Column("stats", sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(["posted_by_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tuits_posted_by_id", "tuits", ["posted_by_id"])
    op.create_index("idx_tuits_posted_on", "tuits", [sa.text("posted_on DESC")])

    for table in JOIN_TABLES:
        op.create_table(
            table,
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("user_id", sa.Uuid(), nullable=False),
            sa.Column("tuit_id", sa.Uuid(), nullable=False),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.text("CURRENT_TIMESTAMP"),
            ),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["tuit_id"], ["tuits.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("user_id", "tuit_id", name=f"uq_{table}_user_tuit"),
        )
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])
        op.create_index(f"ix_{table}_tuit_id", table, ["tuit_id"])


def downgrade() -> None:
    for table in reversed(JOIN_TABLES):
        op.drop_index(f"ix_{table}_tuit_id", table_name=table)
        op.drop_index(f"ix_{table}_user_id", table_name=table)
        op.drop_table(table)
    op.drop_index("idx_tuits_posted_on", table_name="tuits")
    op.drop_index("ix_tuits_posted_by_id", table_name="tuits")
    op.drop_table("tuits")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
