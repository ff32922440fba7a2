"""
Static listings served when no database is configured (local demos,
front-end development). Filtered with the same rules as the SQL queries.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from wayfare.services.listing_service import LISTING_SOURCES, ListingFilters, listing_order
from wayfare.services.pricing import as_utc

MOCK_LISTINGS = {
    "stays": [
        {
            "id": "stay-1",
            "name": "Eko Atlantic Luxury Apartment",
            "description": "Ocean views and premium amenities in the heart of Eko Atlantic City.",
            "property_type": "apartment",
            "city": "Lagos",
            "country": "Nigeria",
            "bedrooms": 2,
            "max_guests": 4,
            "price_per_night": Decimal("250000"),
            "currency": "NGN",
            "amenities": ["Pool", "WiFi", "Gym", "Ocean View", "Security"],
        },
        {
            "id": "stay-2",
            "name": "Modern Loft in Lekki Phase 1",
            "description": "Contemporary loft with high ceilings, ideal for creative professionals.",
            "property_type": "loft",
            "city": "Lagos",
            "country": "Nigeria",
            "bedrooms": 1,
            "max_guests": 2,
            "price_per_night": Decimal("85000"),
            "currency": "NGN",
            "amenities": ["WiFi", "Smart TV", "Workspace", "Kitchen"],
        },
        {
            "id": "stay-3",
            "name": "Maitama Garden Villa",
            "description": "Quiet villa with a private garden close to the city centre.",
            "property_type": "villa",
            "city": "Abuja",
            "country": "Nigeria",
            "bedrooms": 4,
            "max_guests": 8,
            "price_per_night": Decimal("180000"),
            "currency": "NGN",
            "amenities": ["Garden", "WiFi", "Parking"],
        },
    ],
    "events": [
        {
            "id": "event-1",
            "title": "Lagos Jazz Night",
            "description": "An evening of live jazz on the Lagos waterfront.",
            "category": "music",
            "start_date": datetime.fromisoformat("2026-12-20T19:00:00+00:00"),
            "end_date": datetime.fromisoformat("2026-12-20T23:00:00+00:00"),
            "location": "Muri Okunola Park",
            "city": "Lagos",
            "country": "Nigeria",
            "capacity": 300,
            "available_spots": 120,
            "ticket_types": [
                {"type": "regular", "price": Decimal("15000")},
                {"type": "vip", "price": Decimal("40000")},
            ],
            "currency": "NGN",
        },
        {
            "id": "event-2",
            "title": "Abuja Food Festival",
            "description": "Street food, cooking demos and local vendors.",
            "category": "food",
            "start_date": datetime.fromisoformat("2026-11-14T10:00:00+00:00"),
            "end_date": datetime.fromisoformat("2026-11-14T20:00:00+00:00"),
            "location": "Millennium Park",
            "city": "Abuja",
            "country": "Nigeria",
            "capacity": 500,
            "available_spots": 0,
            "ticket_types": [{"type": "general", "price": Decimal("5000")}],
            "currency": "NGN",
        },
    ],
    "transport": [
        {
            "id": "transport-1",
            "provider": "GIG Mobility",
            "transport_type": "bus",
            "route_name": "Lagos - Ibadan Express",
            "origin": "Lagos",
            "destination": "Ibadan",
            "departure_time": datetime.fromisoformat("2026-12-01T07:00:00+00:00"),
            "arrival_time": datetime.fromisoformat("2026-12-01T09:30:00+00:00"),
            "price": Decimal("8500"),
            "currency": "NGN",
            "total_seats": 40,
            "available_seats": 22,
        },
        {
            "id": "transport-2",
            "provider": "NRC",
            "transport_type": "train",
            "route_name": "Abuja - Kaduna",
            "origin": "Abuja",
            "destination": "Kaduna",
            "departure_time": datetime.fromisoformat("2026-12-02T06:00:00+00:00"),
            "arrival_time": datetime.fromisoformat("2026-12-02T08:10:00+00:00"),
            "price": Decimal("6000"),
            "currency": "NGN",
            "total_seats": 300,
            "available_seats": 140,
        },
    ],
    "flights": [
        {
            "id": "flight-1",
            "airline": "Air Peace",
            "flight_number": "P47120",
            "origin_airport": "LOS",
            "destination_airport": "ABV",
            "departure_time": datetime.fromisoformat("2026-12-05T08:00:00+00:00"),
            "arrival_time": datetime.fromisoformat("2026-12-05T09:10:00+00:00"),
            "class_type": "economy",
            "available_seats": 34,
            "price": Decimal("95000"),
            "currency": "NGN",
        },
        {
            "id": "flight-2",
            "airline": "Ibom Air",
            "flight_number": "QI0321",
            "origin_airport": "ABV",
            "destination_airport": "LOS",
            "departure_time": datetime.fromisoformat("2026-12-06T17:30:00+00:00"),
            "arrival_time": datetime.fromisoformat("2026-12-06T18:40:00+00:00"),
            "class_type": "business",
            "available_seats": 0,
            "price": Decimal("210000"),
            "currency": "NGN",
        },
    ],
    "dining": [
        {
            "id": "dining-1",
            "name": "Nok by Alara",
            "description": "Modern West African tasting menus in Victoria Island.",
            "cuisine_type": "african",
            "city": "Lagos",
            "country": "Nigeria",
            "price_range": 3,
            "average_rating": Decimal("4.6"),
            "capacity": 80,
        },
        {
            "id": "dining-2",
            "name": "Yellow Chilli",
            "description": "Nigerian classics with a contemporary twist.",
            "cuisine_type": "african",
            "city": "Abuja",
            "country": "Nigeria",
            "price_range": 2,
            "average_rating": Decimal("4.2"),
            "capacity": 120,
        },
        {
            "id": "dining-3",
            "name": "Sakura Lagos",
            "description": "Sushi bar and teppanyaki grill.",
            "cuisine_type": "japanese",
            "city": "Lagos",
            "country": "Nigeria",
            "price_range": 4,
            "average_rating": Decimal("3.9"),
            "capacity": 40,
        },
    ],
}


def _matches(value: Optional[str], wanted: Optional[str]) -> bool:
    return wanted is None or (value or "").lower() == wanted.lower()


def _accepts(item: dict, kind: str, filters: ListingFilters) -> bool:
    source = LISTING_SOURCES[kind]
    text_filters = (
        (source.city_column, filters.city),
        (source.country_column, filters.country),
        (source.origin_column, filters.origin),
        (source.destination_column, filters.destination),
        (source.category_column, filters.category),
    )
    for column, wanted in text_filters:
        if column and not _matches(item.get(column), wanted):
            return False

    if source.price_column:
        price = item[source.price_column]
        if filters.min_price is not None and price < filters.min_price:
            return False
        if filters.max_price is not None and price > filters.max_price:
            return False
    if filters.guests is not None and source.guests_column and item[source.guests_column] < filters.guests:
        return False
    if filters.min_rating is not None and source.rating_column:
        rating = item.get(source.rating_column)
        if rating is None or rating < filters.min_rating:
            return False
    if filters.starts_after is not None and source.starts_column:
        if item[source.starts_column] < as_utc(filters.starts_after):
            return False
    if filters.ends_before is not None and source.ends_column:
        if item[source.ends_column] > as_utc(filters.ends_before):
            return False
    if filters.available_only and source.counter_column and item[source.counter_column] <= 0:
        return False
    return True


def list_mock_listings(kind: str, filters: ListingFilters = ListingFilters()) -> tuple[list[dict], int]:
    matched = [item for item in MOCK_LISTINGS[kind] if _accepts(item, kind, filters)]

    # Mock rows carry no timestamps; they keep their declared order unless sorted explicitly
    if filters.sort_by in LISTING_SOURCES[kind].sort_columns:
        column, descending = listing_order(LISTING_SOURCES[kind], filters)
        matched.sort(key=lambda item: item[column], reverse=descending)

    start = (filters.page - 1) * filters.page_size
    return matched[start:start + filters.page_size], len(matched)


def get_mock_listing(kind: str, listing_id: str) -> Optional[dict]:
    return next((item for item in MOCK_LISTINGS[kind] if item["id"] == listing_id), None)
