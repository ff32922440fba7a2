"""
Capacity policy interface: the per-resource-kind half of the booking workflow.

Implementations:
- CounterCapacity: denormalized counter (events, transport), atomic decrement
- IntervalCapacity: date-range inventory (accommodations), overlap scans
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from wayfare.core.config import get_settings
from wayfare.core.exceptions import ErrorCode
from wayfare.models.booking import Booking
from wayfare.services.interfaces.store import ResourceStore


@dataclass(frozen=True)
class BookingRequest:
    booking_type: str
    resource_id: str
    quantity: int = 1
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    ticket_type: Optional[str] = None
    special_requests: Optional[str] = None


@dataclass(frozen=True)
class Availability:
    available: bool
    code: Optional[ErrorCode] = None
    remaining: Optional[int] = None


class CapacityPolicy(ABC):
    booking_type: str
    model: type
    label: str
    noun: str = "spots"

    @abstractmethod
    def validate_request(self, resource: Any, request: BookingRequest) -> None:
        """Static checks against the resource's hard ceiling. Raises ExceedsCapacity."""

    @abstractmethod
    async def check_availability(
        self,
        store: ResourceStore,
        resource: Any,
        request: BookingRequest,
    ) -> Availability:
        """Read-only availability check against committed state."""

    @abstractmethod
    def price_of(self, resource: Any, request: BookingRequest) -> Decimal:
        """Total price for the request."""

    @abstractmethod
    def booking_window(self, resource: Any, request: BookingRequest) -> tuple[datetime, Optional[datetime]]:
        """(start_date, end_date) stored on the booking."""

    @abstractmethod
    async def reserve(self, store: ResourceStore, resource: Any, booking: Booking) -> None:
        """
        Commit the capacity claimed by a freshly inserted booking.
        Raises a BookingServiceError if the claim cannot be made; the caller
        compensates by deleting the booking.
        """

    @abstractmethod
    async def release(self, store: ResourceStore, booking: Booking) -> bool:
        """Give back capacity held by a cancelled booking. False if nothing was updated."""

    def metadata_of(self, request: BookingRequest) -> Optional[dict]:
        return None

    def currency_of(self, resource: Any) -> str:
        return resource.currency or get_settings().DEFAULT_CURRENCY
