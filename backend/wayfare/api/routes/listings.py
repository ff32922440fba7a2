"""
Listing endpoints for stays, events, transport, flights and dining.

List pages are cached in Redis and invalidated when a booking changes the
counters of that kind. Single listings are never cached. Without a
database (or when the query fails) the static mock listings are served.
"""

import math
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wayfare.api.deps import ERROR_RESPONSES, error_response
from wayfare.core.exceptions import ResourceNotFound
from wayfare.core.logging import get_logger
from wayfare.db.session import get_optional_db
from wayfare.infrastructure.sql_store import SqlAlchemyResourceStore
from wayfare.schemas.listing import LISTING_SCHEMAS, ListingPage, serialize_listing
from wayfare.services.cache_service import get_cached_listings, set_cached_listings
from wayfare.services.listing_service import LISTING_SOURCES, ListingFilters, get_listing, list_listings
from wayfare.services.mock_listings import get_mock_listing, list_mock_listings
from wayfare.services.results import ServiceError

logger = get_logger(__name__)
router = APIRouter(tags=["Listings"])


def _page(kind: str, items: list, total: int, filters: ListingFilters, source: str) -> dict:
    schema = LISTING_SCHEMAS[kind]
    return {
        "listings": [serialize_listing(schema, item) for item in items],
        "total": total,
        "page": filters.page,
        "page_size": filters.page_size,
        "total_pages": math.ceil(total / filters.page_size),
        "cached": False,
        "source": source,
    }


def _make_list_endpoint(kind: str):
    async def list_endpoint(
        page: int = Query(1, ge=1),
        page_size: int = Query(20, ge=1, le=100),
        city: Optional[str] = Query(None, max_length=100),
        country: Optional[str] = Query(None, max_length=100),
        origin: Optional[str] = Query(None, max_length=100),
        destination: Optional[str] = Query(None, max_length=100),
        category: Optional[str] = Query(None, max_length=50),
        min_price: Optional[Decimal] = Query(None, ge=0),
        max_price: Optional[Decimal] = Query(None, ge=0),
        guests: Optional[int] = Query(None, ge=1),
        min_rating: Optional[Decimal] = Query(None, ge=0, le=5),
        starts_after: Optional[datetime] = Query(None),
        ends_before: Optional[datetime] = Query(None),
        available_only: bool = Query(False),
        sort_by: Optional[str] = Query(None, max_length=50),
        sort_order: Optional[Literal["asc", "desc"]] = Query(None),
        db: Optional[AsyncSession] = Depends(get_optional_db),
    ):
        filters = ListingFilters(
            page=page,
            page_size=page_size,
            city=city,
            country=country,
            origin=origin,
            destination=destination,
            category=category,
            min_price=min_price,
            max_price=max_price,
            guests=guests,
            min_rating=min_rating,
            starts_after=starts_after,
            ends_before=ends_before,
            available_only=available_only,
            sort_by=sort_by,
            sort_order=sort_order,
        )

        if db is None:
            items, total = list_mock_listings(kind, filters)
            return ListingPage(**_page(kind, items, total, filters, "mock"))

        params = filters.as_params()
        cached = await get_cached_listings(kind, params)
        if cached:
            logger.info("listings_cache_hit", kind=kind, page=page)
            cached["cached"] = True
            return ListingPage(**cached)

        try:
            items, total = await list_listings(db, kind, filters)
        except SQLAlchemyError as e:
            logger.warning("listings_query_failed", kind=kind, error=str(e), fallback="mock")
            items, total = list_mock_listings(kind, filters)
            return ListingPage(**_page(kind, items, total, filters, "mock"))

        response_data = _page(kind, items, total, filters, "database")
        await set_cached_listings(kind, params, response_data)
        return ListingPage(**response_data)

    list_endpoint.__doc__ = f"Paginated {kind} listings."
    return list_endpoint


def _make_get_endpoint(kind: str):
    async def get_endpoint(
        listing_id: str,
        db: Optional[AsyncSession] = Depends(get_optional_db),
    ):
        schema = LISTING_SCHEMAS[kind]
        if db is None:
            listing = get_mock_listing(kind, listing_id)
            if listing is None:
                return error_response(ServiceError.from_exception(
                    ResourceNotFound(f"Listing {listing_id} not found", details={"kind": kind})
                ))
            return schema.model_validate(listing)

        result = await get_listing(SqlAlchemyResourceStore(db), kind, listing_id)
        if not result.ok:
            return error_response(result.error)
        return schema.model_validate(result.value)

    get_endpoint.__doc__ = f"A single {kind} listing with live availability."
    return get_endpoint


for _kind in LISTING_SOURCES:
    router.add_api_route(
        f"/{_kind}/",
        _make_list_endpoint(_kind),
        methods=["GET"],
        response_model=ListingPage,
        name=f"list_{_kind}",
    )
    router.add_api_route(
        f"/{_kind}/{{listing_id}}",
        _make_get_endpoint(_kind),
        methods=["GET"],
        response_model=LISTING_SCHEMAS[_kind],
        responses=ERROR_RESPONSES,
        name=f"get_{_kind}",
    )
