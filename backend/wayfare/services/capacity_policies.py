"""
Capacity policies per bookable resource kind.

The booking workflow is written once; what differs between stays, events
and transport lives here:

- Counter shape (events, transport): a denormalized counter is claimed with
  one atomic conditional decrement and given back, capped at the total, on
  cancellation.
- Interval shape (accommodations): nothing to decrement. After the booking
  row is inserted the overlap scan is repeated without it; if another live
  booking slipped in for the same window the new booking is rolled back.
  Two racing requests may both back off, but neither double-books.

Flights and dining venues are save-only and have no policy.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from wayfare.core.exceptions import (
    CapacityUpdateFailed,
    ErrorCode,
    ExceedsCapacity,
    InsufficientCapacity,
    InvalidDateRange,
    NotAvailable,
    ResourceNotFound,
    SoldOut,
    StoreError,
)
from wayfare.core.logging import get_logger
from wayfare.models.accommodation import Accommodation
from wayfare.models.booking import Booking, BookingType
from wayfare.models.event import Event
from wayfare.models.transport import TransportOption
from wayfare.services.availability import counter_availability, interval_availability
from wayfare.services.interfaces.capacity import Availability, BookingRequest, CapacityPolicy
from wayfare.services.interfaces.store import ResourceStore
from wayfare.services.pricing import accommodation_total, as_utc, ticket_total, unit_total

logger = get_logger(__name__)


def raise_unavailable(availability: Availability, label: str, noun: str) -> None:
    """Turn a negative Availability into the matching domain error."""
    if availability.code == ErrorCode.SOLD_OUT:
        raise SoldOut(f"{label} is sold out")
    if availability.code == ErrorCode.INSUFFICIENT_CAPACITY:
        raise InsufficientCapacity(
            f"Only {availability.remaining} {noun} available",
            details={"available": availability.remaining},
        )
    raise NotAvailable(f"{label} is not available for the selected dates")


class CounterCapacity(CapacityPolicy):
    counter_column: str
    total_column: str

    def validate_request(self, resource, request: BookingRequest) -> None:
        total = getattr(resource, self.total_column)
        if request.quantity > total:
            raise ExceedsCapacity(
                f"Requested {request.quantity} {self.noun} exceeds the maximum capacity of {total}",
                details={"requested": request.quantity, "capacity": total},
            )

    async def check_availability(self, store, resource, request: BookingRequest) -> Availability:
        return counter_availability(getattr(resource, self.counter_column), request.quantity)

    async def reserve(self, store: ResourceStore, resource, booking: Booking) -> None:
        try:
            claimed = await store.adjust_counter(
                self.model, resource.id, self.counter_column, -booking.guests
            )
        except StoreError as e:
            raise CapacityUpdateFailed(
                f"Failed to update available {self.noun}",
                details={"operation": e.operation},
            ) from e

        if claimed:
            return

        # Zero rows updated: the capacity was gone by the time we committed
        try:
            current = await store.fetch_one(self.model, resource.id)
        except StoreError as e:
            raise CapacityUpdateFailed(details={"operation": e.operation}) from e
        if current is None:
            raise ResourceNotFound(f"{self.label} not found")

        availability = counter_availability(getattr(current, self.counter_column), booking.guests)
        logger.info(
            "capacity_claim_lost",
            booking_type=self.booking_type,
            resource_id=resource.id,
            requested=booking.guests,
            remaining=availability.remaining,
        )
        if availability.available:
            raise InsufficientCapacity("Capacity changed while booking, please try again")
        raise_unavailable(availability, self.label, self.noun)

    async def release(self, store: ResourceStore, booking: Booking) -> bool:
        return await store.adjust_counter(
            self.model,
            booking.reference_id,
            self.counter_column,
            booking.guests,
            ceiling_column=self.total_column,
        )


class EventCapacity(CounterCapacity):
    booking_type = BookingType.EVENT.value
    model = Event
    counter_column = "available_spots"
    total_column = "capacity"
    label = "Event"
    noun = "spots"

    def price_of(self, resource: Event, request: BookingRequest) -> Decimal:
        return ticket_total(resource.ticket_types, request.ticket_type, request.quantity)

    def booking_window(self, resource: Event, request: BookingRequest) -> tuple[datetime, Optional[datetime]]:
        return resource.start_date, resource.end_date

    def metadata_of(self, request: BookingRequest) -> Optional[dict]:
        return {"ticket_type": request.ticket_type} if request.ticket_type else None


class TransportCapacity(CounterCapacity):
    booking_type = BookingType.TRANSPORT.value
    model = TransportOption
    counter_column = "available_seats"
    total_column = "total_seats"
    label = "Transport option"
    noun = "seats"

    def price_of(self, resource: TransportOption, request: BookingRequest) -> Decimal:
        return unit_total(resource.price, request.quantity)

    def booking_window(self, resource: TransportOption, request: BookingRequest) -> tuple[datetime, Optional[datetime]]:
        # Point in time: the travel date, no end
        return request.start_date or resource.departure_time, None


class IntervalCapacity(CapacityPolicy):
    noun = "nights"

    def _dates(self, request: BookingRequest) -> tuple[datetime, datetime]:
        if request.start_date is None or request.end_date is None:
            raise InvalidDateRange("Check-in and check-out dates are required")
        start, end = as_utc(request.start_date), as_utc(request.end_date)
        if end <= start:
            raise InvalidDateRange("Check-out must be after check-in")
        return start, end

    async def check_availability(self, store, resource, request: BookingRequest) -> Availability:
        start, end = self._dates(request)
        return await interval_availability(store, self.booking_type, resource.id, start, end)

    def booking_window(self, resource, request: BookingRequest) -> tuple[datetime, Optional[datetime]]:
        return self._dates(request)

    async def reserve(self, store: ResourceStore, resource, booking: Booking) -> None:
        availability = await interval_availability(
            store,
            self.booking_type,
            resource.id,
            booking.start_date,
            booking.end_date,
            exclude_booking_id=booking.id,
        )
        if not availability.available:
            logger.info(
                "interval_claim_lost",
                booking_type=self.booking_type,
                resource_id=resource.id,
                booking_id=booking.id,
            )
            raise_unavailable(availability, self.label, self.noun)

    async def release(self, store: ResourceStore, booking: Booking) -> bool:
        # A cancelled booking drops out of overlap scans on its own
        return True


class AccommodationCapacity(IntervalCapacity):
    booking_type = BookingType.ACCOMMODATION.value
    model = Accommodation
    label = "Accommodation"

    def validate_request(self, resource: Accommodation, request: BookingRequest) -> None:
        self._dates(request)
        if request.quantity > resource.max_guests:
            raise ExceedsCapacity(
                f"Number of guests exceeds maximum capacity of {resource.max_guests}",
                details={"requested": request.quantity, "max_guests": resource.max_guests},
            )

    def price_of(self, resource: Accommodation, request: BookingRequest) -> Decimal:
        start, end = self._dates(request)
        return accommodation_total(resource.price_per_night, start, end)


_POLICIES: dict[str, CapacityPolicy] = {
    policy.booking_type: policy
    for policy in (AccommodationCapacity(), EventCapacity(), TransportCapacity())
}

BOOKABLE_TYPES = frozenset(_POLICIES)


def get_policy(booking_type: str) -> CapacityPolicy:
    """Capacity policy for a bookable type. Raises KeyError for save-only kinds."""
    return _POLICIES[booking_type]
