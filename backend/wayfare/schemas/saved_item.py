"""
Pydantic schemas for saved items.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from wayfare.schemas.booking import BookingTypeName


class SavedItemCreate(BaseModel):
    item_type: BookingTypeName
    item_id: str = Field(..., min_length=1, max_length=36)
    notes: Optional[str] = Field(None, max_length=500)


class SavedFlightCreate(BaseModel):
    notes: Optional[str] = Field(None, max_length=500)


class SavedItemResponse(BaseModel):
    id: str
    user_id: str
    item_type: str
    item_id: str
    notes: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class SavedItemEnvelope(BaseModel):
    saved_item: SavedItemResponse


class SavedListingResponse(BaseModel):
    saved_item: SavedItemResponse
    listing: Optional[dict[str, Any]]
    is_available: bool


class SavedItemListResponse(BaseModel):
    items: list[SavedListingResponse]
    total: int
