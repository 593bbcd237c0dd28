"""Create properties, feeds, reservations, task types and cleaning tasks

Revision ID: 3f2a91c0d7b4
Revises:
Create Date: 2025-06-01 09:12:30.418206

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op  # type: ignore[attr-defined]
from sync_cleaning.config import SCHEMA

# revision identifiers, used by Alembic.
revision = "3f2a91c0d7b4"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(nullable: bool = False) -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=nullable
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=nullable
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("platform_user_id", postgresql.UUID(as_uuid=False), nullable=True),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("status", sa.String(), server_default=sa.text("'active'"), nullable=False),
        sa.Column("timezone", sa.String(), nullable=True),
        *_timestamps(),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_properties_platform_user_id", "properties", ["platform_user_id"], schema=SCHEMA
    )

    op.create_table(
        "property_icals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "property_id",
            sa.Integer(),
            sa.ForeignKey(f"{SCHEMA}.properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("url", sa.String(), nullable=False),
        sa.Column("platform", sa.String(), nullable=True),
        sa.Column("active", sa.Boolean(), server_default=sa.text("TRUE"), nullable=False),
        *_timestamps(nullable=True),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_property_icals_property_id", "property_icals", ["property_id"], schema=SCHEMA
    )

    op.create_table(
        "reservations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("reservation_uid", sa.String(), nullable=False, unique=True),
        sa.Column(
            "property_id",
            sa.Integer(),
            sa.ForeignKey(f"{SCHEMA}.properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("platform_user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("guest_name", sa.String(), nullable=True),
        sa.Column("source", sa.String(), server_default=sa.text("'Other'"), nullable=False),
        sa.Column("status", sa.String(), server_default=sa.text("'confirmed'"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        schema=SCHEMA,
    )
    for column in ("property_id", "platform_user_id", "start_date", "end_date"):
        op.create_index(f"ix_reservations_{column}", "reservations", [column], schema=SCHEMA)

    op.create_table(
        "task_types",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("platform_user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.UniqueConstraint("platform_user_id", "name", name="uq_task_types_owner_name"),
        schema=SCHEMA,
    )
    op.create_index(
        "ix_task_types_platform_user_id", "task_types", ["platform_user_id"], schema=SCHEMA
    )

    op.create_table(
        "cleaning_tasks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "property_id",
            sa.Integer(),
            sa.ForeignKey(f"{SCHEMA}.properties.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "reservation_id",
            sa.Integer(),
            sa.ForeignKey(f"{SCHEMA}.reservations.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("platform_user_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("task_category", sa.String(), nullable=True),
        sa.Column(
            "task_type_id",
            sa.Integer(),
            sa.ForeignKey(f"{SCHEMA}.task_types.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("priority_tag", sa.String(), nullable=True),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(), server_default=sa.text("'Unassigned'"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "reservation_id",
            "task_type_id",
            "scheduled_date",
            name="uq_cleaning_tasks_reservation_type_date",
        ),
        schema=SCHEMA,
    )
    for column in ("property_id", "platform_user_id", "scheduled_date"):
        op.create_index(f"ix_cleaning_tasks_{column}", "cleaning_tasks", [column], schema=SCHEMA)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("cleaning_tasks", schema=SCHEMA)
    op.drop_table("task_types", schema=SCHEMA)
    op.drop_table("reservations", schema=SCHEMA)
    op.drop_table("property_icals", schema=SCHEMA)
    op.drop_table("properties", schema=SCHEMA)
