from wayfare.models.accommodation import Accommodation
from wayfare.models.booking import Booking, BookingStatus, BookingType
from wayfare.models.dining import DiningVenue
from wayfare.models.event import Event
from wayfare.models.flight import Flight
from wayfare.models.saved_item import SavedItem
from wayfare.models.transport import TransportOption

# Listing table per booking/item type
LISTING_MODELS = {
    BookingType.ACCOMMODATION: Accommodation,
    BookingType.EVENT: Event,
    BookingType.TRANSPORT: TransportOption,
    BookingType.FLIGHT: Flight,
    BookingType.DINING: DiningVenue,
}

__all__ = [
    "Accommodation", "Booking", "BookingStatus", "BookingType", "DiningVenue",
    "Event", "Flight", "SavedItem", "TransportOption", "LISTING_MODELS",
]
