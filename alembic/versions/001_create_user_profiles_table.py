"""create user_profiles table

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user_profiles",
        sa.Column("user_id", sa.String(64), primary_key=True),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("username", sa.String(100)),
        sa.Column("display_name", sa.String(100)),
        sa.Column("email", sa.String(255)),
        sa.Column("interests", sa.Text()),
        sa.Column("gender", sa.String(32)),
        sa.Column("location", sa.String(200)),
        sa.Column("date_of_birth", sa.Date()),
        sa.Column("avatar_url", sa.Text()),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True),
            server_default=sa.func.now(), nullable=False,
        ),
    )


def downgrade() -> None:
    op.drop_table("user_profiles")
