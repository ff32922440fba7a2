"""
Tests for booking queries, edits and status changes.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select

from wayfare.core.exceptions import ErrorCode
from wayfare.infrastructure.sql_store import SqlAlchemyResourceStore
from wayfare.models import Booking, Event
from wayfare.services.booking_service import (
    BookingChanges,
    BookingFilters,
    change_booking_status,
    get_booking,
    get_user_bookings,
    update_booking,
)
from wayfare.services.booking_workflow import create_booking
from wayfare.services.interfaces.capacity import BookingRequest

from conftest import OTHER_USER_ID, USER_ID

DEC_20 = datetime(2026, 12, 20, tzinfo=timezone.utc)


class RacingMoveStore(SqlAlchemyResourceStore):
    """Commits another guest's stay on the new dates just before a move is written."""

    def __init__(self, session):
        super().__init__(session)
        self.raced = False

    async def update(self, model, row_id, patch, **expected):
        if model is Booking and "start_date" in patch and not self.raced:
            self.raced = True
            booking = await self.fetch_one(Booking, row_id, exclude_soft_deleted=False)
            await self.insert(Booking(
                user_id=OTHER_USER_ID,
                booking_type=booking.booking_type,
                reference_id=booking.reference_id,
                status="pending",
                start_date=patch["start_date"],
                end_date=patch["end_date"],
                guests=1,
                total_price=0,
            ))
        return await super().update(model, row_id, patch, **expected)


async def book_stay(store, stay, start=DEC_20, nights=3, user_id=USER_ID):
    request = BookingRequest(
        "accommodation", stay.id, start_date=start, end_date=start + timedelta(days=nights)
    )
    result = await create_booking(store, user_id, request)
    assert result.ok
    return result.value


async def book_event(store, event, quantity=1):
    result = await create_booking(store, USER_ID, BookingRequest("event", event.id, quantity=quantity))
    assert result.ok
    return result.value


@pytest.mark.asyncio
async def test_get_booking_is_owner_scoped(store, test_event):
    booking = await book_event(store, test_event)

    assert (await get_booking(store, booking.id, USER_ID)).value.id == booking.id
    assert (await get_booking(store, booking.id, OTHER_USER_ID)).error.code == ErrorCode.BOOKING_NOT_FOUND


@pytest.mark.asyncio
async def test_list_bookings_paginates_and_filters(store, db_session, test_event, test_stay):
    for _ in range(3):
        await book_event(store, test_event)
    await book_stay(store, test_stay)

    result = await get_user_bookings(db_session, USER_ID, BookingFilters(page=1, limit=2))
    page = result.value
    assert page.total == 4
    assert len(page.bookings) == 2
    assert page.total_pages == 2
    assert page.has_next and not page.has_prev

    events_only = (await get_user_bookings(db_session, USER_ID, BookingFilters(booking_type="event"))).value
    assert events_only.total == 3

    others = (await get_user_bookings(db_session, OTHER_USER_ID)).value
    assert others.total == 0


@pytest.mark.asyncio
async def test_list_bookings_filters_by_start_date(store, db_session, test_stay):
    await book_stay(store, test_stay, start=DEC_20)
    await book_stay(store, test_stay, start=DEC_20 + timedelta(days=10))

    filters = BookingFilters(start_from=DEC_20 + timedelta(days=5))
    page = (await get_user_bookings(db_session, USER_ID, filters)).value
    assert page.total == 1


@pytest.mark.asyncio
async def test_special_requests_always_editable(store, test_event):
    booking = await book_event(store, test_event)

    result = await update_booking(store, booking.id, USER_ID, BookingChanges(special_requests="Aisle seat"))

    assert result.ok
    assert result.value.special_requests == "Aisle seat"


@pytest.mark.asyncio
async def test_stay_dates_can_move_and_are_repriced(store, test_stay):
    booking = await book_stay(store, test_stay, nights=3)

    changes = BookingChanges(start_date=DEC_20 + timedelta(days=1), end_date=DEC_20 + timedelta(days=5))
    result = await update_booking(store, booking.id, USER_ID, changes)

    assert result.ok
    assert result.value.total_price == Decimal("440.00")


@pytest.mark.asyncio
async def test_stay_cannot_move_onto_another_booking(store, test_stay):
    mine = await book_stay(store, test_stay, start=DEC_20, nights=2)
    await book_stay(store, test_stay, start=DEC_20 + timedelta(days=5), nights=2, user_id=OTHER_USER_ID)

    changes = BookingChanges(end_date=DEC_20 + timedelta(days=6))
    result = await update_booking(store, mine.id, USER_ID, changes)
    assert result.error.code == ErrorCode.NOT_AVAILABLE


@pytest.mark.asyncio
async def test_invalid_date_range(store, test_stay):
    booking = await book_stay(store, test_stay)

    result = await update_booking(store, booking.id, USER_ID, BookingChanges(end_date=DEC_20))
    assert result.error.code == ErrorCode.INVALID_DATE_RANGE


@pytest.mark.asyncio
async def test_guest_limit_applies_to_edits(store, test_stay):
    booking = await book_stay(store, test_stay)

    result = await update_booking(store, booking.id, USER_ID, BookingChanges(guests=5))
    assert result.error.code == ErrorCode.EXCEEDS_CAPACITY


@pytest.mark.asyncio
async def test_counter_bookings_keep_their_quantity(store, test_event):
    booking = await book_event(store, test_event, 2)

    result = await update_booking(store, booking.id, USER_ID, BookingChanges(guests=4))

    assert result.error.code == ErrorCode.CANNOT_MODIFY
    assert (await store.fetch_one(Event, test_event.id)).available_spots == 98


@pytest.mark.asyncio
async def test_terminal_bookings_cannot_be_modified(store, test_event):
    booking = await book_event(store, test_event)
    await change_booking_status(store, booking.id, "cancelled", user_id=USER_ID)

    result = await update_booking(store, booking.id, USER_ID, BookingChanges(special_requests="late"))
    assert result.error.code == ErrorCode.CANNOT_MODIFY


@pytest.mark.asyncio
async def test_status_moves_forward(store, test_event):
    booking = await book_event(store, test_event)

    confirmed = await change_booking_status(store, booking.id, "confirmed")
    assert confirmed.value.status == "confirmed"

    completed = await change_booking_status(store, booking.id, "completed")
    assert completed.value.status == "completed"


@pytest.mark.asyncio
async def test_status_cannot_skip_or_go_back(store, test_event):
    booking = await book_event(store, test_event)

    skipped = await change_booking_status(store, booking.id, "completed")
    assert skipped.error.code == ErrorCode.INVALID_STATUS_TRANSITION

    await change_booking_status(store, booking.id, "confirmed")
    back = await change_booking_status(store, booking.id, "pending")
    assert back.error.code == ErrorCode.INVALID_STATUS_TRANSITION


@pytest.mark.asyncio
async def test_status_cancel_restores_capacity(store, test_event):
    booking = await book_event(store, test_event, 3)

    result = await change_booking_status(store, booking.id, "cancelled")

    assert result.value.status == "cancelled"
    assert (await store.fetch_one(Event, test_event.id)).available_spots == 100


@pytest.mark.asyncio
async def test_racing_move_onto_taken_dates_is_reverted(db_session, test_stay):
    store = RacingMoveStore(db_session)
    booking = await book_stay(store, test_stay, start=DEC_20, nights=3)
    original_price = booking.total_price

    new_start = DEC_20 + timedelta(days=10)
    changes = BookingChanges(start_date=new_start, end_date=new_start + timedelta(days=2))
    result = await update_booking(store, booking.id, USER_ID, changes)

    assert result.error.code == ErrorCode.NOT_AVAILABLE

    mine = await store.fetch_one(Booking, booking.id)
    assert mine.start_date.replace(tzinfo=timezone.utc) == DEC_20
    assert mine.end_date.replace(tzinfo=timezone.utc) == DEC_20 + timedelta(days=3)
    assert mine.total_price == original_price

    in_new_window = await db_session.execute(
        select(Booking).where(Booking.reference_id == test_stay.id, Booking.start_date == new_start)
    )
    assert [b.user_id for b in in_new_window.scalars().all()] == [OTHER_USER_ID]
