"""
Availability check.

Read-only: decides whether a resource can take a request given committed
state. Counter-shaped resources compare the counter with the requested
quantity; interval-shaped resources scan live bookings for overlap.
A failed read surfaces as AvailabilityCheckFailed (a LookupError); this
layer does not tell "missing resource" from "store unreachable".
"""

from datetime import datetime
from typing import Optional

from wayfare.core.exceptions import AvailabilityCheckFailed, ErrorCode, StoreError
from wayfare.models.booking import LIVE_STATUSES
from wayfare.services.interfaces.capacity import Availability, BookingRequest
from wayfare.services.interfaces.store import ResourceStore
from wayfare.services.pricing import as_utc


def intervals_overlap(a: datetime, b: datetime, c: datetime, d: datetime) -> bool:
    """[a, b) and [c, d) intersect. Checkout on day X does not clash with check-in on day X."""
    return as_utc(a) < as_utc(d) and as_utc(c) < as_utc(b)


def counter_availability(counter: int, quantity: int) -> Availability:
    # Sold out is reported before the generic shortage
    if counter <= 0:
        return Availability(available=False, code=ErrorCode.SOLD_OUT, remaining=0)
    if counter < quantity:
        return Availability(available=False, code=ErrorCode.INSUFFICIENT_CAPACITY, remaining=counter)
    return Availability(available=True, remaining=counter)


async def interval_availability(
    store: ResourceStore,
    booking_type: str,
    resource_id: str,
    start: datetime,
    end: datetime,
    exclude_booking_id: Optional[str] = None,
) -> Availability:
    try:
        clashes = await store.query_overlap(
            booking_type,
            resource_id,
            as_utc(start),
            as_utc(end),
            LIVE_STATUSES,
            exclude_booking_id=exclude_booking_id,
        )
    except StoreError as e:
        raise AvailabilityCheckFailed(details={"operation": e.operation}) from e
    if clashes:
        return Availability(available=False, code=ErrorCode.NOT_AVAILABLE)
    return Availability(available=True)


async def check_availability(
    store: ResourceStore,
    booking_type: str,
    resource_id: str,
    quantity: int = 1,
    date_range: Optional[tuple[datetime, datetime]] = None,
) -> Availability:
    """Standalone availability query for a resource of the given kind."""
    # Imported here: the policies module depends on this one
    from wayfare.services.capacity_policies import get_policy

    try:
        policy = get_policy(booking_type)
    except KeyError:
        raise AvailabilityCheckFailed(
            f"{booking_type} listings have no capacity to check",
            details={"booking_type": booking_type},
        ) from None
    try:
        resource = await store.fetch_one(policy.model, resource_id)
    except StoreError as e:
        raise AvailabilityCheckFailed(details={"operation": e.operation}) from e
    if resource is None:
        raise AvailabilityCheckFailed(details={"resource_id": resource_id})

    start, end = date_range if date_range else (None, None)
    request = BookingRequest(
        booking_type=booking_type,
        resource_id=resource_id,
        quantity=quantity,
        start_date=start,
        end_date=end,
    )
    return await policy.check_availability(store, resource, request)
