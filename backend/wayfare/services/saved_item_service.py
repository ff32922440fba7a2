"""
Saved items: a user's bookmarks of listings.

Saving is a check-then-insert; the unique (user_id, item_type, item_id)
constraint makes the insert the real arbiter, so a racing duplicate is
reported as ALREADY_SAVED rather than as a write failure.
"""

from dataclasses import dataclass
from typing import Any, Optional

from wayfare.core.exceptions import (
    AlreadySaved,
    BookingServiceError,
    FetchFailed,
    IntegrityViolation,
    ItemNotFound,
    RemoveFailed,
    SaveFailed,
    StoreError,
)
from wayfare.core.logging import get_logger
from wayfare.core.metrics import record_saved_item_operation
from wayfare.models import LISTING_MODELS, BookingType, SavedItem
from wayfare.services.interfaces.store import ResourceStore
from wayfare.services.results import returns_result

logger = get_logger(__name__)


@dataclass(frozen=True)
class SavedListing:
    saved_item: SavedItem
    listing: Optional[Any]
    is_available: bool


def listing_is_available(item_type: str, listing: Optional[Any]) -> bool:
    if listing is None or getattr(listing, "deleted_at", None) is not None:
        return False
    if item_type == BookingType.EVENT:
        return listing.available_spots > 0
    if item_type in (BookingType.TRANSPORT, BookingType.FLIGHT):
        return listing.available_seats > 0
    return True


def _model_for(item_type: str):
    try:
        return LISTING_MODELS[BookingType(item_type)]
    except ValueError:
        raise ItemNotFound(f"Unknown item type: {item_type}") from None


async def _save(store: ResourceStore, user_id: str, item_type: str, item_id: str, notes: Optional[str]) -> SavedItem:
    model = _model_for(item_type)
    try:
        listing = await store.fetch_one(model, item_id)
    except StoreError as e:
        raise SaveFailed(details={"operation": e.operation}) from e
    if listing is None:
        raise ItemNotFound(f"{item_type.capitalize()} not found")

    try:
        existing = await store.find_one(SavedItem, user_id=user_id, item_type=item_type, item_id=item_id)
    except StoreError as e:
        raise SaveFailed(details={"operation": e.operation}) from e
    if existing is not None:
        raise AlreadySaved(details={"saved_item_id": existing.id})

    try:
        saved = await store.insert(
            SavedItem(user_id=user_id, item_type=item_type, item_id=item_id, notes=notes or None)
        )
    except IntegrityViolation as e:
        # Lost the race to a concurrent save of the same item
        raise AlreadySaved() from e
    except StoreError as e:
        raise SaveFailed(details={"operation": e.operation}) from e

    logger.info("item_saved", saved_item_id=saved.id, user_id=user_id, item_type=item_type, item_id=item_id)
    return saved


async def _remove(store: ResourceStore, user_id: str, saved_item_id: str) -> None:
    try:
        deleted = await store.delete(SavedItem, saved_item_id, user_id=user_id)
    except StoreError as e:
        raise RemoveFailed(details={"operation": e.operation}) from e
    if not deleted:
        raise ItemNotFound("Saved item not found")
    logger.info("saved_item_removed", saved_item_id=saved_item_id, user_id=user_id)


async def _tracked(operation: str, coro):
    try:
        value = await coro
    except BookingServiceError as e:
        record_saved_item_operation(operation, e.code.value)
        raise
    record_saved_item_operation(operation, "success")
    return value


@returns_result
async def save_item(
    store: ResourceStore,
    user_id: str,
    item_type: str,
    item_id: str,
    notes: Optional[str] = None,
) -> SavedItem:
    return await _tracked("save", _save(store, user_id, item_type, item_id, notes))


@returns_result
async def remove_saved_item(store: ResourceStore, saved_item_id: str, user_id: str) -> None:
    """Owner-scoped delete; someone else's item looks the same as a missing one."""
    await _tracked("remove", _remove(store, user_id, saved_item_id))


@returns_result
async def list_saved_items(
    store: ResourceStore,
    user_id: str,
    item_type: Optional[str] = None,
) -> list[SavedListing]:
    criteria = {"user_id": user_id}
    if item_type is not None:
        criteria["item_type"] = item_type
    try:
        items = await store.find_many(SavedItem, order_by="created_at", descending=True, **criteria)
        enriched = []
        for item in items:
            listing = await store.fetch_one(
                LISTING_MODELS[BookingType(item.item_type)],
                item.item_id,
                exclude_soft_deleted=False,
            )
            enriched.append(
                SavedListing(
                    saved_item=item,
                    listing=listing,
                    is_available=listing_is_available(item.item_type, listing),
                )
            )
    except StoreError as e:
        raise FetchFailed("Failed to fetch saved items", details={"operation": e.operation}) from e
    return enriched


# Flights

@returns_result
async def save_flight(store: ResourceStore, user_id: str, flight_id: str, notes: Optional[str] = None) -> SavedItem:
    return await _tracked("save", _save(store, user_id, BookingType.FLIGHT.value, flight_id, notes))


@returns_result
async def unsave_flight(store: ResourceStore, user_id: str, flight_id: str) -> None:
    try:
        saved = await store.find_one(
            SavedItem, user_id=user_id, item_type=BookingType.FLIGHT.value, item_id=flight_id
        )
    except StoreError as e:
        record_saved_item_operation("remove", RemoveFailed.code.value)
        raise RemoveFailed(details={"operation": e.operation}) from e
    if saved is None:
        record_saved_item_operation("remove", ItemNotFound.code.value)
        raise ItemNotFound("Flight is not saved")
    await _tracked("remove", _remove(store, user_id, saved.id))


async def get_saved_flights(store: ResourceStore, user_id: str):
    return await list_saved_items(store, user_id, BookingType.FLIGHT.value)
