"""
Booking queries and maintenance: listing a user's bookings, reading one,
editing non-capacity fields and moving bookings through their status
machine. Creation and cancellation live in booking_workflow.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.core.exceptions import (
    BookingNotFound,
    BookingServiceError,
    CannotModify,
    FetchFailed,
    InvalidDateRange,
    InvalidStatusTransition,
    ResourceNotFound,
    StoreError,
    UpdateFailed,
)
from wayfare.core.logging import get_logger
from wayfare.models.booking import ALLOWED_TRANSITIONS, Booking, BookingStatus
from wayfare.services.availability import interval_availability
from wayfare.services.booking_workflow import BookingWorkflow
from wayfare.services.capacity_policies import IntervalCapacity, get_policy, raise_unavailable
from wayfare.services.interfaces.capacity import BookingRequest
from wayfare.services.interfaces.store import ResourceStore
from wayfare.services.pricing import as_utc
from wayfare.services.results import returns_result

logger = get_logger(__name__)


@dataclass(frozen=True)
class BookingFilters:
    page: int = 1
    limit: int = 20
    status: Optional[str] = None
    booking_type: Optional[str] = None
    start_from: Optional[datetime] = None
    start_to: Optional[datetime] = None


@dataclass(frozen=True)
class BookingPage:
    bookings: list[Booking]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


@dataclass(frozen=True)
class BookingChanges:
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    guests: Optional[int] = None
    special_requests: Optional[str] = None


@returns_result
async def get_user_bookings(
    db: AsyncSession,
    user_id: str,
    filters: BookingFilters = BookingFilters(),
) -> BookingPage:
    """Paginated bookings of one user, newest first."""
    query = select(Booking).where(Booking.user_id == user_id)

    if filters.status:
        query = query.where(Booking.status == filters.status)
    if filters.booking_type:
        query = query.where(Booking.booking_type == filters.booking_type)
    if filters.start_from:
        query = query.where(Booking.start_date >= as_utc(filters.start_from))
    if filters.start_to:
        query = query.where(Booking.start_date <= as_utc(filters.start_to))

    try:
        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar() or 0

        page_query = (
            query
            .order_by(Booking.created_at.desc())
            .offset((filters.page - 1) * filters.limit)
            .limit(filters.limit)
        )
        result = await db.execute(page_query)
    except SQLAlchemyError as e:
        logger.error("bookings_fetch_failed", user_id=user_id, error=str(e))
        raise FetchFailed("Failed to fetch bookings") from e

    return BookingPage(
        bookings=list(result.scalars().all()),
        page=filters.page,
        limit=filters.limit,
        total=total,
    )


async def _load_booking(store: ResourceStore, booking_id: str, user_id: Optional[str]) -> Booking:
    criteria = {"id": booking_id}
    if user_id is not None:
        criteria["user_id"] = user_id
    try:
        booking = await store.find_one(Booking, **criteria)
    except StoreError as e:
        raise FetchFailed(details={"operation": e.operation}) from e
    if booking is None:
        raise BookingNotFound()
    return booking


@returns_result
async def get_booking(store: ResourceStore, booking_id: str, user_id: str) -> Booking:
    return await _load_booking(store, booking_id, user_id)


@returns_result
async def update_booking(
    store: ResourceStore,
    booking_id: str,
    user_id: str,
    changes: BookingChanges,
) -> Booking:
    """
    Edit a live booking. Special requests are always editable; dates and
    guest counts only on stays, where capacity is derived from the booking
    rows themselves and no counter has to stay in step.
    """
    booking = await _load_booking(store, booking_id, user_id)
    status = BookingStatus(booking.status)
    if status.is_terminal:
        raise CannotModify(f"Cannot modify booking with status: {status.value}")

    patch = {}
    if changes.special_requests is not None:
        patch["special_requests"] = changes.special_requests

    wants_dates = changes.start_date is not None or changes.end_date is not None
    if wants_dates or changes.guests is not None:
        start = as_utc(changes.start_date or booking.start_date)
        end = changes.end_date or booking.end_date
        if wants_dates and (end is None or as_utc(end) <= start):
            raise InvalidDateRange()

        try:
            policy = get_policy(booking.booking_type)
        except KeyError:
            policy = None
        if not isinstance(policy, IntervalCapacity):
            raise CannotModify(f"Dates and guests cannot be changed on {booking.booking_type} bookings")

        try:
            resource = await store.fetch_one(policy.model, booking.reference_id)
        except StoreError as e:
            raise FetchFailed(details={"operation": e.operation}) from e
        if resource is None:
            raise ResourceNotFound(f"{policy.label} not found")

        request = BookingRequest(
            booking_type=booking.booking_type,
            resource_id=booking.reference_id,
            quantity=changes.guests or booking.guests,
            start_date=start,
            end_date=as_utc(end),
        )
        policy.validate_request(resource, request)
        if wants_dates:
            availability = await interval_availability(
                store,
                booking.booking_type,
                booking.reference_id,
                request.start_date,
                request.end_date,
                exclude_booking_id=booking.id,
            )
            if not availability.available:
                raise_unavailable(availability, policy.label, policy.noun)

        patch.update(
            start_date=request.start_date,
            end_date=request.end_date,
            guests=request.quantity,
            total_price=policy.price_of(resource, request),
        )

    if not patch:
        return booking

    previous = {name: getattr(booking, name) for name in patch}
    try:
        updated = await store.update(Booking, booking.id, patch, status=status.value)
    except StoreError as e:
        raise UpdateFailed(details={"operation": e.operation}) from e
    if updated is None:
        raise CannotModify("Booking changed while updating, please try again")

    if wants_dates:
        # Same post-write overlap check as a new stay; the loser moves back
        try:
            await policy.reserve(store, resource, updated)
        except BookingServiceError as e:
            await _restore_window(store, updated, previous, status.value, e)
            raise

    logger.info("booking_updated", booking_id=booking.id, fields=sorted(patch))
    return updated


async def _restore_window(
    store: ResourceStore,
    booking: Booking,
    previous: dict,
    status: str,
    reason: BookingServiceError,
) -> None:
    """Write back the dates, guests and price a lost overlap check displaced."""
    try:
        await store.update(Booking, booking.id, previous, status=status)
    except StoreError as e:
        logger.error("booking_update_revert_failed", booking_id=booking.id, previous=str(previous), error=str(e))
        reason.details = {**(reason.details or {}), "unreverted_booking_id": booking.id}
        return
    logger.warning("booking_update_reverted", booking_id=booking.id, reason=reason.code.value)


@returns_result
async def change_booking_status(
    store: ResourceStore,
    booking_id: str,
    new_status: str,
    user_id: Optional[str] = None,
) -> Booking:
    """
    Move a booking along pending -> confirmed -> completed. Cancelling goes
    through the cancellation workflow so capacity is given back.
    """
    booking = await _load_booking(store, booking_id, user_id)
    current = BookingStatus(booking.status)
    target = BookingStatus(new_status)

    if target == BookingStatus.CANCELLED:
        return await BookingWorkflow(store).cancel(booking)

    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransition(
            f"Cannot change status from {current.value} to {target.value}",
            details={"from": current.value, "to": target.value},
        )

    try:
        updated = await store.update(Booking, booking.id, {"status": target.value}, status=current.value)
    except StoreError as e:
        raise UpdateFailed("Failed to update booking status", details={"operation": e.operation}) from e
    if updated is None:
        raise InvalidStatusTransition("Booking status changed concurrently, please retry")

    logger.info("booking_status_changed", booking_id=booking.id, old=current.value, new=target.value)
    return updated


__all__ = [
    "BookingChanges",
    "BookingFilters",
    "BookingPage",
    "change_booking_status",
    "get_booking",
    "get_user_bookings",
    "update_booking",
]
