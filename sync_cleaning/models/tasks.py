"""SQLAlchemy models for task types and cleaning tasks."""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from sync_cleaning.config import SCHEMA
from sync_cleaning.models.base import Base


class TaskType(Base):
    """
    ORM model for an account's task types ("Clean", "Inspection", ...).

    Generation needs the "Clean" type of the property's owning account.
    """

    __tablename__ = "task_types"
    __table_args__ = (
        UniqueConstraint("platform_user_id", "name", name="uq_task_types_owner_name"),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True)
    platform_user_id = Column(UUID(as_uuid=False), nullable=False, index=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class CleaningTask(Base):
    """
    ORM model for one unit of cleaning work.

    (reservation_id, task_type_id, scheduled_date) is the idempotence key used by
    the generator. status starts at "Unassigned"; a "Completed" task is never
    touched by generation again.
    """

    __tablename__ = "cleaning_tasks"
    __table_args__ = (
        UniqueConstraint(
            "reservation_id",
            "task_type_id",
            "scheduled_date",
            name="uq_cleaning_tasks_reservation_type_date",
        ),
        {"schema": SCHEMA},
    )

    id = Column(Integer, primary_key=True)
    property_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reservation_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.reservations.id", ondelete="SET NULL"),
        nullable=True,
    )
    platform_user_id = Column(UUID(as_uuid=False), nullable=False, index=True)
    task_category = Column(String, nullable=True)
    task_type_id = Column(
        Integer, ForeignKey(f"{SCHEMA}.task_types.id", ondelete="RESTRICT"), nullable=False
    )
    priority_tag = Column(String, nullable=True)
    scheduled_date = Column(Date, nullable=False, index=True)
    status = Column(String, nullable=False, server_default=text("'Unassigned'"))
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
