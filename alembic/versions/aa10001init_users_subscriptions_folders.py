"""create users, subscriptions and folders

Revision ID: aa10001init
Revises:
Create Date: 2026-01-12 10:00:00.000000

Hey future me - this is the baseline schema. Every later migration builds on it.

TABLES:
- users: one row per account. ``password`` is the bcrypt HASH, never plain text.
  Email is unique; the app compares it case-insensitively.
- subscriptions: at most one per user (user_id UNIQUE), switching plans updates in place.
- folders: user folders, soft-deleted via is_deleted. parent_id is SET NULL so a
  hard-deleted parent turns its children into top-level folders.

Both child tables cascade on user delete, removing an account removes its data.
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "aa10001init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("plan", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "folders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("icon", sa.Text(), nullable=True),
        sa.Column(
            "parent_id",
            sa.Integer(),
            sa.ForeignKey("folders.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_folders_user_deleted", "folders", ["user_id", "is_deleted"])


def downgrade() -> None:
    op.drop_index("ix_folders_user_deleted", table_name="folders")
    op.drop_table("folders")
    op.drop_table("subscriptions")
    op.drop_table("users")
