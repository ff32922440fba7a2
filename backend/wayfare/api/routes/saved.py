"""
Saved item endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from wayfare.api.deps import ERROR_RESPONSES, error_response, get_store
from wayfare.core.security import get_current_user_id
from wayfare.schemas.booking import BookingTypeName
from wayfare.schemas.listing import SCHEMA_BY_TYPE, serialize_listing
from wayfare.schemas.saved_item import (
    SavedFlightCreate,
    SavedItemCreate,
    SavedItemEnvelope,
    SavedItemListResponse,
    SavedItemResponse,
    SavedListingResponse,
)
from wayfare.services.interfaces.store import ResourceStore
from wayfare.services.saved_item_service import (
    SavedListing,
    get_saved_flights,
    list_saved_items,
    remove_saved_item,
    save_flight,
    save_item,
    unsave_flight,
)

router = APIRouter(prefix="/saved", tags=["Saved items"])


def _saved_listing(entry: SavedListing) -> SavedListingResponse:
    listing = None
    if entry.listing is not None:
        listing = serialize_listing(SCHEMA_BY_TYPE[entry.saved_item.item_type], entry.listing)
    return SavedListingResponse(
        saved_item=SavedItemResponse.model_validate(entry.saved_item),
        listing=listing,
        is_available=entry.is_available,
    )


def _listing_response(entries: list[SavedListing]) -> SavedItemListResponse:
    return SavedItemListResponse(items=[_saved_listing(e) for e in entries], total=len(entries))


@router.post(
    "/",
    response_model=SavedItemEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def save_item_endpoint(
    item: SavedItemCreate,
    user_id: str = Depends(get_current_user_id),
    store: ResourceStore = Depends(get_store),
):
    result = await save_item(store, user_id, item.item_type, item.item_id, item.notes)
    if not result.ok:
        return error_response(result.error)
    return SavedItemEnvelope(saved_item=SavedItemResponse.model_validate(result.value))


@router.get("/", response_model=SavedItemListResponse)
async def list_saved_items_endpoint(
    item_type: Optional[BookingTypeName] = Query(None),
    user_id: str = Depends(get_current_user_id),
    store: ResourceStore = Depends(get_store),
):
    """Saved items, newest first, each with its listing and availability."""
    result = await list_saved_items(store, user_id, item_type)
    if not result.ok:
        return error_response(result.error)
    return _listing_response(result.value)


@router.get("/flights", response_model=SavedItemListResponse)
async def list_saved_flights_endpoint(
    user_id: str = Depends(get_current_user_id),
    store: ResourceStore = Depends(get_store),
):
    result = await get_saved_flights(store, user_id)
    if not result.ok:
        return error_response(result.error)
    return _listing_response(result.value)


@router.post(
    "/flights/{flight_id}",
    response_model=SavedItemEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def save_flight_endpoint(
    flight_id: str,
    body: Optional[SavedFlightCreate] = None,
    user_id: str = Depends(get_current_user_id),
    store: ResourceStore = Depends(get_store),
):
    result = await save_flight(store, user_id, flight_id, body.notes if body else None)
    if not result.ok:
        return error_response(result.error)
    return SavedItemEnvelope(saved_item=SavedItemResponse.model_validate(result.value))


@router.delete(
    "/flights/{flight_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
)
async def unsave_flight_endpoint(
    flight_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ResourceStore = Depends(get_store),
):
    result = await unsave_flight(store, user_id, flight_id)
    if not result.ok:
        return error_response(result.error)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{saved_item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=ERROR_RESPONSES,
)
async def remove_saved_item_endpoint(
    saved_item_id: str,
    user_id: str = Depends(get_current_user_id),
    store: ResourceStore = Depends(get_store),
):
    result = await remove_saved_item(store, saved_item_id, user_id)
    if not result.ok:
        return error_response(result.error)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
