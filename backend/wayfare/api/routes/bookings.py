"""
Booking endpoints. Creation and cancellation run the capacity-bounded
workflow; failures come back as {"error": {...}} with a mapped status.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.api.deps import ERROR_RESPONSES, error_response, get_store
from wayfare.core.logging import get_logger
from wayfare.core.security import get_current_user_id
from wayfare.db.session import get_db
from wayfare.schemas.booking import (
    BookingCancelResponse,
    BookingCreate,
    BookingEnvelope,
    BookingListResponse,
    BookingResponse,
    BookingStatusName,
    BookingStatusUpdate,
    BookingTypeName,
    BookingUpdate,
)
from wayfare.services.booking_service import (
    BookingChanges,
    BookingFilters,
    change_booking_status,
    get_booking,
    get_user_bookings,
    update_booking,
)
from wayfare.services.booking_workflow import BookingWorkflow
from wayfare.services.cache_service import invalidate_listing_cache
from wayfare.services.interfaces.capacity import BookingRequest
from wayfare.services.interfaces.store import ResourceStore
from wayfare.services.listing_service import LISTING_KIND_BY_TYPE

logger = get_logger(__name__)
router = APIRouter(prefix="/bookings", tags=["Bookings"])


async def _invalidate_listings(booking_type: str) -> None:
    kind = LISTING_KIND_BY_TYPE.get(booking_type)
    if kind:
        await invalidate_listing_cache(kind)


@router.post(
    "/",
    response_model=BookingEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    user_id: str = Depends(get_current_user_id),
    store: ResourceStore = Depends(get_store),
):
    """
    Book a stay, event tickets or transport seats.

    Capacity is claimed with a single conditional update; if the claim
    fails the freshly inserted booking is removed before the error is
    returned, so a failed request never leaves a booking behind.
    """
    request = BookingRequest(
        booking_type=booking_data.booking_type,
        resource_id=booking_data.resource_id,
        quantity=booking_data.quantity,
        start_date=booking_data.start_date,
        end_date=booking_data.end_date,
        ticket_type=booking_data.ticket_type,
        special_requests=booking_data.special_requests,
    )
    result = await BookingWorkflow(store).create_booking(user_id, request)
    if not result.ok:
        return error_response(result.error)

    # Counters (or blocked dates) changed
    await _invalidate_listings(result.value.booking_type)
    return BookingEnvelope(booking=BookingResponse.model_validate(result.value))


@router.get("/", response_model=BookingListResponse)
async def list_user_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: Optional[BookingStatusName] = Query(None, alias="status"),
    booking_type: Optional[BookingTypeName] = Query(None),
    start_from: Optional[datetime] = Query(None),
    start_to: Optional[datetime] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Bookings of the authenticated user, newest first."""
    filters = BookingFilters(
        page=page,
        limit=limit,
        status=status_filter,
        booking_type=booking_type,
        start_from=start_from,
        start_to=start_to,
    )
    result = await get_user_bookings(db, user_id, filters)
    if not result.ok:
        return error_response(result.error)

    listing = result.value
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in listing.bookings],
        total=listing.total,
        page=listing.page,
        limit=listing.limit,
        total_pages=listing.total_pages,
        has_next=listing.has_next,
        has_prev=listing.has_prev,
    )


@router.get("/{booking_id}", response_model=BookingEnvelope, responses=ERROR_RESPONSES)
async def get_booking_endpoint(
    booking_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ResourceStore = Depends(get_store),
):
    result = await get_booking(store, booking_id, user_id)
    if not result.ok:
        return error_response(result.error)
    return BookingEnvelope(booking=BookingResponse.model_validate(result.value))


@router.patch("/{booking_id}", response_model=BookingEnvelope, responses=ERROR_RESPONSES)
async def update_booking_endpoint(
    booking_id: str,
    changes: BookingUpdate,
    user_id: str = Depends(get_current_user_id),
    store: ResourceStore = Depends(get_store),
):
    """Edit special requests, or dates and guests of a stay."""
    result = await update_booking(
        store,
        booking_id,
        user_id,
        BookingChanges(**changes.model_dump(exclude_unset=True)),
    )
    if not result.ok:
        return error_response(result.error)
    if changes.start_date or changes.end_date:
        await _invalidate_listings(result.value.booking_type)
    return BookingEnvelope(booking=BookingResponse.model_validate(result.value))


@router.delete("/{booking_id}", response_model=BookingCancelResponse, responses=ERROR_RESPONSES)
async def cancel_booking_endpoint(
    booking_id: str,
    reason: Optional[str] = Query(None, max_length=500),
    user_id: str = Depends(get_current_user_id),
    store: ResourceStore = Depends(get_store),
):
    """Cancel a booking and give its capacity back."""
    result = await BookingWorkflow(store).cancel_booking(booking_id, user_id, reason=reason)
    if not result.ok:
        return error_response(result.error)

    await _invalidate_listings(result.value.booking_type)
    return BookingCancelResponse(
        message="Booking cancelled successfully",
        booking=BookingResponse.model_validate(result.value),
    )


@router.put("/{booking_id}/status", response_model=BookingEnvelope, responses=ERROR_RESPONSES)
async def change_booking_status_endpoint(
    booking_id: str,
    update: BookingStatusUpdate,
    user_id: str = Depends(get_current_user_id),
    store: ResourceStore = Depends(get_store),
):
    result = await change_booking_status(store, booking_id, update.status, user_id=user_id)
    if not result.ok:
        return error_response(result.error)
    if update.status == "cancelled":
        await _invalidate_listings(result.value.booking_type)
    return BookingEnvelope(booking=BookingResponse.model_validate(result.value))
