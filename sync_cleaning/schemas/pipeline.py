from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class GenerateTasksPayload(BaseModel):
    """
    Schema for requesting task generation. property_id is checked by the route
    so a missing value answers 400 rather than 422.
    """

    property_id: Optional[int] = Field(None, description="Property to generate tasks for")


class SyncICalPayload(BaseModel):
    """
    Schema for syncing one property's feeds.
    """

    property_id: Optional[int] = Field(None, description="Property to sync")
    platform_user_id: Optional[UUID] = Field(None, description="Owning account of the property")
    ical_url: Optional[str] = Field(
        None, description="Sync only this feed URL instead of the stored active feeds"
    )
