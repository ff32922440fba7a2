from wayfare.schemas.booking import (
    BookingCancelResponse, BookingCreate, BookingEnvelope, BookingListResponse,
    BookingResponse, BookingStatusUpdate, BookingUpdate,
)
from wayfare.schemas.error import ErrorBody, ErrorResponse
from wayfare.schemas.listing import LISTING_SCHEMAS, SCHEMA_BY_TYPE, ListingPage, serialize_listing
from wayfare.schemas.saved_item import (
    SavedFlightCreate, SavedItemCreate, SavedItemEnvelope, SavedItemListResponse,
    SavedItemResponse, SavedListingResponse,
)

__all__ = [
    "BookingCancelResponse", "BookingCreate", "BookingEnvelope", "BookingListResponse",
    "BookingResponse", "BookingStatusUpdate", "BookingUpdate",
    "ErrorBody", "ErrorResponse",
    "LISTING_SCHEMAS", "SCHEMA_BY_TYPE", "ListingPage", "serialize_listing",
    "SavedFlightCreate", "SavedItemCreate", "SavedItemEnvelope", "SavedItemListResponse",
    "SavedItemResponse", "SavedListingResponse",
]
