"""init_schema

Revision ID: 3f9a1c2d7b41
Revises: 
Create Date: 2026-10-17 09:42:11.503318

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql



revision = '3f9a1c2d7b41'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("has_paid", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "task",
        sa.Column("task_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column("text", sa.String(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("task_id"),
    )
    op.create_index(
        "ix_task_owner_position",
        "task",
        ["owner_id", "position"],
        unique=False,
    )
    op.create_index(
        "ix_task_owner_completed",
        "task",
        ["owner_id", "completed_at"],
        unique=False,
    )
    op.create_index(
        "ix_task_owner_archived",
        "task",
        ["owner_id", "archived_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_task_owner_archived", table_name="task")
    op.drop_index("ix_task_owner_completed", table_name="task")
    op.drop_index("ix_task_owner_position", table_name="task")
    op.drop_table("task")

    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
