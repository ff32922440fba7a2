"""
Tests for listing endpoints, filters and the mock-data fallback.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from httpx import AsyncClient

from wayfare.db.session import get_optional_db
from wayfare.main import app
from wayfare.models import Accommodation, DiningVenue
from wayfare.services.cache_service import make_listing_key
from wayfare.services.listing_service import LISTING_SOURCES, ListingFilters, listing_order
from wayfare.services.mock_listings import MOCK_LISTINGS, list_mock_listings


@pytest.mark.asyncio
async def test_list_events(client: AsyncClient, test_event, sold_out_event):
    response = await client.get("/api/v1/events/")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["source"] == "database"
    assert data["cached"] is False


@pytest.mark.asyncio
async def test_available_only_hides_sold_out(client: AsyncClient, test_event, sold_out_event):
    response = await client.get("/api/v1/events/", params={"available_only": True})
    titles = [item["title"] for item in response.json()["listings"]]
    assert titles == ["Test Concert"]


@pytest.mark.asyncio
async def test_city_filter_is_case_insensitive(client: AsyncClient, test_event, sold_out_event):
    response = await client.get("/api/v1/events/", params={"city": "abuja"})
    assert response.json()["total"] == 1


@pytest.mark.asyncio
async def test_transport_route_filter(client: AsyncClient, test_transport):
    hit = await client.get("/api/v1/transport/", params={"origin": "Lagos", "destination": "Ibadan"})
    assert hit.json()["total"] == 1

    miss = await client.get("/api/v1/transport/", params={"origin": "Abuja"})
    assert miss.json()["total"] == 0


@pytest.mark.asyncio
async def test_stay_price_range(client: AsyncClient, test_stay):
    inside = await client.get("/api/v1/stays/", params={"min_price": 50, "max_price": 150})
    assert inside.json()["total"] == 1

    above = await client.get("/api/v1/stays/", params={"min_price": 200})
    assert above.json()["total"] == 0


@pytest.mark.asyncio
async def test_soft_deleted_listings_hidden(client: AsyncClient, db_session, test_stay):
    test_stay.deleted_at = datetime.now(timezone.utc)
    await db_session.commit()

    listed = await client.get("/api/v1/stays/")
    assert listed.json()["total"] == 0

    single = await client.get(f"/api/v1/stays/{test_stay.id}")
    assert single.status_code == 404
    assert single.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


@pytest.mark.asyncio
async def test_get_flight(client: AsyncClient, test_flight):
    response = await client.get(f"/api/v1/flights/{test_flight.id}")
    assert response.status_code == 200
    assert response.json()["origin_airport"] == "LOS"


@pytest.mark.asyncio
async def test_mock_fallback_without_database(client: AsyncClient):
    async def no_database():
        yield None

    app.dependency_overrides[get_optional_db] = no_database

    response = await client.get("/api/v1/stays/")
    data = response.json()
    assert data["source"] == "mock"
    assert data["total"] == len(MOCK_LISTINGS["stays"])

    single = await client.get("/api/v1/flights/flight-1")
    assert single.status_code == 200
    assert single.json()["airline"] == "Air Peace"

    missing = await client.get("/api/v1/flights/nope")
    assert missing.status_code == 404


def test_mock_listings_apply_filters():
    items, total = list_mock_listings("flights", ListingFilters(available_only=True))
    assert total == 1
    assert items[0]["id"] == "flight-1"

    items, total = list_mock_listings("stays", ListingFilters(city="abuja"))
    assert [item["id"] for item in items] == ["stay-3"]


def test_listing_cache_key_is_stable():
    params = ListingFilters(page=2, city="Lagos").as_params()
    key = make_listing_key("stays", params)
    assert key.startswith("listings:stays:")
    assert key == make_listing_key("stays", dict(reversed(list(params.items()))))
    assert "city=Lagos" in key


@pytest.mark.asyncio
async def test_health_and_metrics(client: AsyncClient):
    health = await client.get("/health")
    assert health.status_code == 200
    assert health.json()["cache"] == {"status": "disabled"}

    metrics = await client.get("/metrics")
    assert metrics.status_code == 200
    assert "booking_attempts_total" in metrics.text
    assert 'http_requests_total{method="GET",route="/health",status_code="200"}' in metrics.text


# Filters carried over from the marketplace front end

async def add_dining(session, **overrides):
    fields = dict(name="Nok", cuisine_type="african", city="Lagos", country="Nigeria",
                  price_range=3, average_rating=Decimal("4.5"), capacity=60)
    fields.update(overrides)
    venue = DiningVenue(**fields)
    session.add(venue)
    await session.commit()
    return venue


@pytest.mark.asyncio
async def test_list_dining(client: AsyncClient, db_session):
    await add_dining(db_session)
    await add_dining(db_session, name="Sakura", cuisine_type="japanese", average_rating=Decimal("3.8"))

    response = await client.get("/api/v1/dining/")
    assert response.status_code == 200
    assert response.json()["total"] == 2

    japanese = await client.get("/api/v1/dining/", params={"category": "Japanese"})
    assert [item["name"] for item in japanese.json()["listings"]] == ["Sakura"]

    well_rated = await client.get("/api/v1/dining/", params={"min_rating": "4"})
    assert [item["name"] for item in well_rated.json()["listings"]] == ["Nok"]


@pytest.mark.asyncio
async def test_get_dining_venue(client: AsyncClient, db_session):
    venue = await add_dining(db_session)

    response = await client.get(f"/api/v1/dining/{venue.id}")
    assert response.status_code == 200
    assert response.json()["cuisine_type"] == "african"


@pytest.mark.asyncio
async def test_stay_guest_filter(client: AsyncClient, test_stay):
    fits = await client.get("/api/v1/stays/", params={"guests": 2})
    assert fits.json()["total"] == 1

    too_many = await client.get("/api/v1/stays/", params={"guests": 3})
    assert too_many.json()["total"] == 0


@pytest.mark.asyncio
async def test_country_filter(client: AsyncClient, test_stay, test_event):
    assert (await client.get("/api/v1/stays/", params={"country": "nigeria"})).json()["total"] == 1
    assert (await client.get("/api/v1/stays/", params={"country": "Ghana"})).json()["total"] == 0
    assert (await client.get("/api/v1/events/", params={"country": "Ghana"})).json()["total"] == 0


@pytest.mark.asyncio
async def test_event_category_and_window(client: AsyncClient, test_event, sold_out_event):
    music = await client.get("/api/v1/events/", params={"category": "music"})
    assert music.json()["total"] == 2

    food = await client.get("/api/v1/events/", params={"category": "food"})
    assert food.json()["total"] == 0

    now = datetime.now(timezone.utc)
    later = await client.get("/api/v1/events/", params={"starts_after": (now + timedelta(days=60)).isoformat()})
    assert later.json()["total"] == 0

    within = await client.get(
        "/api/v1/events/",
        params={"starts_after": now.isoformat(), "ends_before": (now + timedelta(days=31)).isoformat()},
    )
    assert within.json()["total"] == 2

    too_soon = await client.get("/api/v1/events/", params={"ends_before": (now + timedelta(days=1)).isoformat()})
    assert too_soon.json()["total"] == 0


@pytest.mark.asyncio
async def test_sort_stays_by_price(client: AsyncClient, db_session, test_stay):
    db_session.add(Accommodation(
        name="Budget Room",
        property_type="room",
        city="Lagos",
        country="Nigeria",
        max_guests=1,
        price_per_night=Decimal("40.00"),
    ))
    await db_session.commit()

    cheapest = await client.get("/api/v1/stays/", params={"sort_by": "price_per_night", "sort_order": "asc"})
    assert [item["name"] for item in cheapest.json()["listings"]] == ["Budget Room", "Lekki Loft"]

    dearest = await client.get("/api/v1/stays/", params={"sort_by": "price_per_night", "sort_order": "desc"})
    assert [item["name"] for item in dearest.json()["listings"]] == ["Lekki Loft", "Budget Room"]


@pytest.mark.asyncio
async def test_unknown_sort_key_uses_default_order(client: AsyncClient, test_stay):
    response = await client.get("/api/v1/stays/", params={"sort_by": "deleted_at"})
    assert response.status_code == 200
    assert response.json()["total"] == 1

    bad_order = await client.get("/api/v1/stays/", params={"sort_order": "sideways"})
    assert bad_order.status_code == 422


def test_listing_order_whitelist():
    stays = LISTING_SOURCES["stays"]
    assert listing_order(stays, ListingFilters()) == ("created_at", True)
    assert listing_order(stays, ListingFilters(sort_by="price_per_night")) == ("price_per_night", True)
    assert listing_order(stays, ListingFilters(sort_by="price_per_night", sort_order="asc")) == (
        "price_per_night",
        False,
    )
    assert listing_order(stays, ListingFilters(sort_by="user_id", sort_order="asc")) == ("created_at", False)


def test_mock_dining_filters_and_sorting():
    items, total = list_mock_listings("dining", ListingFilters(min_rating=Decimal("4")))
    assert total == 2
    assert {item["id"] for item in items} == {"dining-1", "dining-2"}

    items, _ = list_mock_listings("dining", ListingFilters(sort_by="average_rating", sort_order="asc"))
    assert [item["id"] for item in items] == ["dining-3", "dining-2", "dining-1"]

    items, _ = list_mock_listings("stays", ListingFilters(guests=5))
    assert [item["id"] for item in items] == ["stay-3"]

    window = ListingFilters(starts_after=datetime(2026, 12, 1, tzinfo=timezone.utc))
    items, _ = list_mock_listings("events", window)
    assert [item["id"] for item in items] == ["event-1"]
