"""enforce email uniqueness case-insensitively

Revision ID: aa10002
Revises: aa10001init
Create Date: 2026-02-03 09:00:00.000000

Hey future me - the app compares lower(email), the baseline column constraint compares the
raw string. Two concurrent sign-ups for "Bob@x.com" and "bob@x.com" both got past the
email_taken() check and both inserted. This expression index makes the second INSERT fail,
and the repository turns that failure into a 409.
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "aa10002"
down_revision = "aa10001init"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_index(
        "uq_users_email_lower", "users", [sa.text("lower(email)")], unique=True
    )


def downgrade() -> None:
    op.drop_index("uq_users_email_lower", table_name="users")
