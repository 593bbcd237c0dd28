# models/reservations.py

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from sync_cleaning.config import SCHEMA
from sync_cleaning.models.base import Base


class Reservation(Base):
    """
    ORM model for one guest stay ingested from a calendar feed.

    reservation_uid is the UID of the source calendar event and is unique across
    the whole table, so re-ingesting an event updates the row in place. Rows are
    never deleted by the sync; cancellations arrive as status changes.
    """

    __tablename__ = "reservations"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True, autoincrement=True)
    reservation_uid = Column(String, nullable=False, unique=True)
    property_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    platform_user_id = Column(UUID(as_uuid=False), nullable=False, index=True)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False, index=True)
    guest_name = Column(String, nullable=True)
    source = Column(String, nullable=False, server_default=text("'Other'"))
    status = Column(String, nullable=False, server_default=text("'confirmed'"))
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
