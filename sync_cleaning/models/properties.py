"""SQLAlchemy models for managed properties and their calendar feeds."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from sync_cleaning.config import SCHEMA
from sync_cleaning.models.base import Base


class Property(Base):
    """
    ORM model for a managed property (rentable unit).

    A property is picked up by the bulk sync only when status is "active" and
    it has an owning account (platform_user_id). timezone overrides the
    operating timezone used to decide which checkouts are "today or later".
    """

    __tablename__ = "properties"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True)
    platform_user_id = Column(UUID(as_uuid=False), nullable=True, index=True)
    name = Column(String, nullable=True)
    status = Column(String, nullable=False, server_default=text("'active'"))
    timezone = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class PropertyICal(Base):
    """
    ORM model for one iCal feed URL attached to a property.

    platform is the label entered alongside the URL (e.g. "Airbnb") and is the
    last-resort booking source when nothing in the events identifies one.
    """

    __tablename__ = "property_icals"
    __table_args__ = {"schema": SCHEMA}

    id = Column(Integer, primary_key=True)
    property_id = Column(
        Integer,
        ForeignKey(f"{SCHEMA}.properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url = Column(String, nullable=False)
    platform = Column(String, nullable=True)
    active = Column(Boolean, nullable=False, server_default=text("TRUE"))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True
    )
