"""
Tests for cancellation: ownership, terminal statuses and capacity restore.
"""

from datetime import datetime, timezone

import pytest
from prometheus_client import REGISTRY

from wayfare.core.exceptions import ErrorCode, StoreError
from wayfare.infrastructure.sql_store import SqlAlchemyResourceStore
from wayfare.models import Booking, Event, TransportOption
from wayfare.services.booking_workflow import BookingWorkflow, cancel_booking, create_booking
from wayfare.services.interfaces.capacity import BookingRequest

from conftest import OTHER_USER_ID, USER_ID


class NoRestoreStore(SqlAlchemyResourceStore):
    """Capacity claims work, giving capacity back always fails."""

    restore_calls = 0

    async def adjust_counter(self, model, row_id, column, delta, ceiling_column=None):
        if delta > 0:
            self.restore_calls += 1
            raise StoreError("adjust_counter")
        return await super().adjust_counter(model, row_id, column, delta, ceiling_column)


class StatusWriteFailingStore(SqlAlchemyResourceStore):
    """Booking status writes fail; everything else works."""

    async def update(self, model, row_id, patch, **expected):
        if model is Booking:
            raise StoreError("update")
        return await super().update(model, row_id, patch, **expected)


async def book_event(store, event, quantity=1, user_id=USER_ID) -> Booking:
    result = await create_booking(store, user_id, BookingRequest("event", event.id, quantity=quantity))
    assert result.ok
    return result.value


@pytest.mark.asyncio
async def test_cancel_restores_spots_and_records_reason(store, test_event):
    booking = await book_event(store, test_event, 4)

    result = await cancel_booking(store, booking.id, USER_ID, reason="Change of plans")

    assert result.ok
    cancelled = result.value
    assert cancelled.status == "cancelled"
    assert cancelled.cancelled_at is not None
    assert cancelled.extra["cancellation_reason"] == "Change of plans"
    assert (await store.fetch_one(Event, test_event.id)).available_spots == 100


@pytest.mark.asyncio
async def test_cannot_cancel_someone_elses_booking(store, test_event):
    booking = await book_event(store, test_event)

    result = await cancel_booking(store, booking.id, OTHER_USER_ID)

    assert result.error.code == ErrorCode.BOOKING_NOT_FOUND
    assert (await store.fetch_one(Booking, booking.id)).status == "pending"


@pytest.mark.asyncio
async def test_booking_type_scopes_lookup(store, test_event):
    booking = await book_event(store, test_event)

    result = await cancel_booking(store, booking.id, USER_ID, booking_type="transport")
    assert result.error.code == ErrorCode.BOOKING_NOT_FOUND


@pytest.mark.asyncio
async def test_unknown_booking(store):
    result = await cancel_booking(store, "missing", USER_ID)
    assert result.error.code == ErrorCode.BOOKING_NOT_FOUND


@pytest.mark.asyncio
@pytest.mark.parametrize("terminal_status", ["cancelled", "completed"])
async def test_terminal_bookings_cannot_be_cancelled(store, test_event, terminal_status):
    """Re-cancelling is rejected and changes neither booking nor counter."""
    booking = await book_event(store, test_event, 2)
    await store.update(Booking, booking.id, {"status": terminal_status})
    spots_before = (await store.fetch_one(Event, test_event.id)).available_spots

    result = await cancel_booking(store, booking.id, USER_ID)

    assert result.error.code == ErrorCode.CANNOT_CANCEL
    assert (await store.fetch_one(Booking, booking.id)).status == terminal_status
    assert (await store.fetch_one(Event, test_event.id)).available_spots == spots_before


@pytest.mark.asyncio
async def test_double_cancel_restores_once(store, test_transport):
    result = await create_booking(store, USER_ID, BookingRequest("transport", test_transport.id, quantity=3))
    booking_id = result.value.id

    assert (await cancel_booking(store, booking_id, USER_ID)).ok
    again = await cancel_booking(store, booking_id, USER_ID)

    assert again.error.code == ErrorCode.CANNOT_CANCEL
    assert (await store.fetch_one(TransportOption, test_transport.id)).available_seats == 10


@pytest.mark.asyncio
async def test_restore_is_capped_at_capacity(store, db_session, test_event):
    booking = await book_event(store, test_event, 5)
    # Counter refilled out of band (manual reconciliation)
    await store.adjust_counter(Event, test_event.id, "available_spots", 5, ceiling_column="capacity")

    assert (await cancel_booking(store, booking.id, USER_ID)).ok
    assert (await store.fetch_one(Event, test_event.id)).available_spots == 100


@pytest.mark.asyncio
async def test_failed_restore_keeps_booking_cancelled(db_session, test_event):
    store = NoRestoreStore(db_session)
    booking = await book_event(store, test_event, 2)
    failures_before = REGISTRY.get_sample_value(
        "capacity_restore_failures_total", {"booking_type": "event"}
    ) or 0

    result = await BookingWorkflow(store, restore_attempts=3).cancel_booking(booking.id, USER_ID)

    assert result.ok
    assert result.value.status == "cancelled"
    assert store.restore_calls == 3
    assert (await store.fetch_one(Event, test_event.id)).available_spots == 98
    failures_after = REGISTRY.get_sample_value(
        "capacity_restore_failures_total", {"booking_type": "event"}
    )
    assert failures_after == failures_before + 1


@pytest.mark.asyncio
async def test_cancel_stay_needs_no_restore(store, test_stay):
    start = datetime(2026, 12, 20, tzinfo=timezone.utc)
    request = BookingRequest(
        "accommodation", test_stay.id, start_date=start, end_date=start.replace(day=23)
    )
    booking = (await create_booking(store, USER_ID, request)).value

    assert (await cancel_booking(store, booking.id, USER_ID)).ok

    # The dates are free again
    assert (await create_booking(store, OTHER_USER_ID, request)).ok


@pytest.mark.asyncio
async def test_failed_status_write_changes_nothing(store, db_session, test_event):
    booking = await book_event(store, test_event, 3)

    result = await cancel_booking(StatusWriteFailingStore(db_session), booking.id, USER_ID)

    assert result.error.code == ErrorCode.CANCELLATION_FAILED
    assert (await store.fetch_one(Booking, booking.id)).status == "pending"
    assert (await store.fetch_one(Event, test_event.id)).available_spots == 97


@pytest.mark.asyncio
async def test_zero_restore_attempts_is_honoured(db_session, test_event):
    store = NoRestoreStore(db_session)
    booking = await book_event(store, test_event, 2)
    workflow = BookingWorkflow(store, restore_attempts=0)

    result = await workflow.cancel_booking(booking.id, USER_ID)

    assert workflow.restore_attempts == 0
    assert result.value.status == "cancelled"
    assert store.restore_calls == 0
    assert (await store.fetch_one(Event, test_event.id)).available_spots == 98
