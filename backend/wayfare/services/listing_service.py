"""
Listing queries for stays, events, transport, flights and dining.

Listings are read straight from the session (no workflow involved) and
exclude soft-deleted rows. Each kind declares which of its columns answer
the generic filters; a filter a kind has no column for is ignored.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.core.exceptions import FetchFailed, ResourceNotFound, StoreError
from wayfare.core.logging import get_logger
from wayfare.models import Accommodation, BookingType, DiningVenue, Event, Flight, TransportOption
from wayfare.services.interfaces.store import ResourceStore
from wayfare.services.pricing import as_utc
from wayfare.services.results import returns_result

logger = get_logger(__name__)


@dataclass(frozen=True)
class ListingSource:
    model: type
    order_by: str
    descending: bool = False
    sort_columns: tuple[str, ...] = ()
    city_column: Optional[str] = None
    country_column: Optional[str] = None
    origin_column: Optional[str] = None
    destination_column: Optional[str] = None
    category_column: Optional[str] = None
    price_column: Optional[str] = None
    counter_column: Optional[str] = None
    guests_column: Optional[str] = None
    rating_column: Optional[str] = None
    starts_column: Optional[str] = None
    ends_column: Optional[str] = None


LISTING_SOURCES = {
    "stays": ListingSource(
        Accommodation,
        order_by="created_at",
        descending=True,
        sort_columns=("created_at", "price_per_night", "max_guests", "name"),
        city_column="city",
        country_column="country",
        price_column="price_per_night",
        guests_column="max_guests",
    ),
    "events": ListingSource(
        Event,
        order_by="start_date",
        sort_columns=("start_date", "created_at", "available_spots", "title"),
        city_column="city",
        country_column="country",
        category_column="category",
        counter_column="available_spots",
        starts_column="start_date",
        ends_column="end_date",
    ),
    "transport": ListingSource(
        TransportOption,
        order_by="departure_time",
        sort_columns=("departure_time", "price", "available_seats"),
        origin_column="origin",
        destination_column="destination",
        category_column="transport_type",
        price_column="price",
        counter_column="available_seats",
        starts_column="departure_time",
        ends_column="arrival_time",
    ),
    "flights": ListingSource(
        Flight,
        order_by="departure_time",
        sort_columns=("departure_time", "price", "available_seats"),
        origin_column="origin_airport",
        destination_column="destination_airport",
        category_column="class_type",
        price_column="price",
        counter_column="available_seats",
        starts_column="departure_time",
        ends_column="arrival_time",
    ),
    "dining": ListingSource(
        DiningVenue,
        order_by="created_at",
        descending=True,
        sort_columns=("created_at", "average_rating", "price_range", "name"),
        city_column="city",
        country_column="country",
        category_column="cuisine_type",
        rating_column="average_rating",
    ),
}

# Listing pages affected by a booking of each type
LISTING_KIND_BY_TYPE = {
    BookingType.ACCOMMODATION.value: "stays",
    BookingType.EVENT.value: "events",
    BookingType.TRANSPORT.value: "transport",
    BookingType.FLIGHT.value: "flights",
    BookingType.DINING.value: "dining",
}


@dataclass(frozen=True)
class ListingFilters:
    """
    Generic listing filters. ``category`` matches the kind's own grouping
    (event category, transport type, cabin class, cuisine). ``starts_after``
    and ``ends_before`` bound the event or departure window.
    """

    page: int = 1
    page_size: int = 20
    city: Optional[str] = None
    country: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    category: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    guests: Optional[int] = None
    min_rating: Optional[Decimal] = None
    starts_after: Optional[datetime] = None
    ends_before: Optional[datetime] = None
    available_only: bool = False
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None

    def as_params(self) -> dict[str, Any]:
        return asdict(self)


def listing_order(source: ListingSource, filters: ListingFilters) -> tuple[str, bool]:
    """Column and direction for a page; unknown sort keys fall back to the kind's default."""
    if filters.sort_by in source.sort_columns:
        column = filters.sort_by
        descending = filters.sort_order == "desc" if filters.sort_order else source.descending
    else:
        column = source.order_by
        descending = source.descending if filters.sort_order is None else filters.sort_order == "desc"
    return column, descending


def _same_text(column, value: str):
    return func.lower(column) == value.lower()


def _filtered(source: ListingSource, filters: ListingFilters):
    model = source.model
    query = select(model).where(model.deleted_at.is_(None))

    text_filters = (
        (source.city_column, filters.city),
        (source.country_column, filters.country),
        (source.origin_column, filters.origin),
        (source.destination_column, filters.destination),
        (source.category_column, filters.category),
    )
    for column_name, value in text_filters:
        if value and column_name:
            query = query.where(_same_text(getattr(model, column_name), value))

    if source.price_column:
        price = getattr(model, source.price_column)
        if filters.min_price is not None:
            query = query.where(price >= filters.min_price)
        if filters.max_price is not None:
            query = query.where(price <= filters.max_price)
    if filters.guests is not None and source.guests_column:
        query = query.where(getattr(model, source.guests_column) >= filters.guests)
    if filters.min_rating is not None and source.rating_column:
        query = query.where(getattr(model, source.rating_column) >= filters.min_rating)
    if filters.starts_after is not None and source.starts_column:
        query = query.where(getattr(model, source.starts_column) >= as_utc(filters.starts_after))
    if filters.ends_before is not None and source.ends_column:
        query = query.where(getattr(model, source.ends_column) <= as_utc(filters.ends_before))
    if filters.available_only and source.counter_column:
        query = query.where(getattr(model, source.counter_column) > 0)
    return query


async def list_listings(
    db: AsyncSession,
    kind: str,
    filters: ListingFilters = ListingFilters(),
) -> tuple[list, int]:
    """One page of listings of a kind plus the total matching count."""
    source = LISTING_SOURCES[kind]
    query = _filtered(source, filters)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    column_name, descending = listing_order(source, filters)
    column = getattr(source.model, column_name)
    page_query = (
        query
        .order_by(column.desc() if descending else column.asc(), source.model.id)
        .offset((filters.page - 1) * filters.page_size)
        .limit(filters.page_size)
    )
    result = await db.execute(page_query)
    return list(result.scalars().all()), total


@returns_result
async def get_listing(store: ResourceStore, kind: str, listing_id: str):
    source = LISTING_SOURCES[kind]
    try:
        listing = await store.fetch_one(source.model, listing_id)
    except StoreError as e:
        raise FetchFailed(details={"operation": e.operation}) from e
    if listing is None:
        raise ResourceNotFound(f"Listing {listing_id} not found", details={"kind": kind})
    return listing
