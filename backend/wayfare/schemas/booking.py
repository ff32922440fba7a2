"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from wayfare.core.config import get_settings

BookingTypeName = Literal["accommodation", "event", "transport", "flight", "dining"]
BookableTypeName = Literal["accommodation", "event", "transport"]
BookingStatusName = Literal["pending", "confirmed", "cancelled", "completed"]


class BookingCreate(BaseModel):
    booking_type: BookableTypeName
    resource_id: str = Field(..., min_length=1, max_length=36)
    quantity: int = Field(default=1, gt=0, le=100)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    ticket_type: Optional[str] = Field(None, max_length=50)
    special_requests: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def check_request(self) -> "BookingCreate":
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        limit = get_settings().MAX_TICKETS_PER_BOOKING
        if self.booking_type != "accommodation" and self.quantity > limit:
            raise ValueError(f"At most {limit} tickets or seats per booking")
        return self


class BookingUpdate(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    guests: Optional[int] = Field(None, gt=0, le=100)
    special_requests: Optional[str] = Field(None, max_length=1000)


class BookingStatusUpdate(BaseModel):
    status: BookingStatusName


class BookingResponse(BaseModel):
    id: str
    user_id: str
    booking_type: str
    reference_id: str
    status: str
    booking_date: datetime
    start_date: datetime
    end_date: Optional[datetime]
    guests: int
    total_price: Decimal
    currency: str
    special_requests: Optional[str]
    # Stored on the ORM model as `extra`
    metadata: Optional[dict[str, Any]] = Field(None, validation_alias="extra")
    cancelled_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BookingEnvelope(BaseModel):
    booking: BookingResponse


class BookingCancelResponse(BaseModel):
    message: str
    booking: BookingResponse


class BookingListResponse(BaseModel):
    bookings: list[BookingResponse]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool
