"""
Pydantic schemas for listings. Rows and mock dicts go through the same
models, so both sources produce identical payloads.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel


class ListingBase(BaseModel):
    id: str
    currency: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StayResponse(ListingBase):
    name: str
    description: Optional[str] = None
    property_type: str
    city: str
    country: str
    bedrooms: int
    max_guests: int
    price_per_night: Decimal
    amenities: list[str] = []


class TicketTier(BaseModel):
    type: str
    price: Decimal


class EventResponse(ListingBase):
    title: str
    description: Optional[str] = None
    category: str
    start_date: datetime
    end_date: datetime
    location: Optional[str] = None
    city: str
    country: str
    capacity: int
    available_spots: int
    ticket_types: list[TicketTier] = []


class TransportResponse(ListingBase):
    provider: str
    transport_type: str
    route_name: str
    origin: str
    destination: str
    departure_time: datetime
    arrival_time: datetime
    price: Decimal
    total_seats: int
    available_seats: int


class FlightResponse(ListingBase):
    airline: str
    flight_number: str
    origin_airport: str
    destination_airport: str
    departure_time: datetime
    arrival_time: datetime
    class_type: str
    available_seats: int
    price: Decimal


class DiningResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    cuisine_type: Optional[str] = None
    city: str
    country: str
    price_range: int
    average_rating: Optional[Decimal] = None
    capacity: int = 0
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


LISTING_SCHEMAS = {
    "stays": StayResponse,
    "events": EventResponse,
    "transport": TransportResponse,
    "flights": FlightResponse,
    "dining": DiningResponse,
}

# Saved items and bookings name listing kinds by booking type
SCHEMA_BY_TYPE = {
    "accommodation": StayResponse,
    "event": EventResponse,
    "transport": TransportResponse,
    "flight": FlightResponse,
    "dining": DiningResponse,
}


def serialize_listing(schema: type[BaseModel], listing: Any) -> dict:
    return schema.model_validate(listing).model_dump(mode="json")


class ListingPage(BaseModel):
    listings: list[dict[str, Any]]
    total: int
    page: int
    page_size: int
    total_pages: int
    cached: bool = False
    source: str = "database"
