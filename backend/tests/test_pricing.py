"""
Tests for the price calculator.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

from wayfare.services.pricing import (
    accommodation_total,
    as_utc,
    count_nights,
    select_ticket_price,
    ticket_total,
    unit_total,
)


def test_accommodation_total_adds_service_fee():
    """Three nights at 100 plus 10% fee."""
    total = accommodation_total(Decimal("100"), date(2026, 12, 20), date(2026, 12, 23))
    assert total == Decimal("330.00")


def test_accommodation_total_is_deterministic():
    args = (Decimal("87.35"), date(2026, 3, 1), date(2026, 3, 5))
    assert accommodation_total(*args) == accommodation_total(*args)
    assert accommodation_total(*args) == Decimal("384.34")


def test_accommodation_total_custom_fee_rate():
    total = accommodation_total(Decimal("100"), date(2026, 1, 1), date(2026, 1, 2), Decimal("0"))
    assert total == Decimal("100.00")


def test_nights_round_partial_days_up():
    check_in = datetime(2026, 12, 20, 15, 0, tzinfo=timezone.utc)
    check_out = datetime(2026, 12, 22, 11, 0, tzinfo=timezone.utc)
    assert count_nights(check_in, check_out) == 2


def test_nights_ignore_timezone_of_input():
    naive = datetime(2026, 12, 20)
    aware = datetime(2026, 12, 23, tzinfo=timezone.utc)
    assert count_nights(naive, aware) == 3


def test_unit_total():
    assert unit_total(Decimal("25.00"), 3) == Decimal("75.00")
    assert unit_total(19.999, 1) == Decimal("20.00")


def test_ticket_price_matches_tier():
    tiers = [{"type": "regular", "price": 50}, {"type": "vip", "price": 120}]
    assert select_ticket_price(tiers, "vip") == Decimal("120")


def test_ticket_price_falls_back_to_first_tier():
    tiers = [{"type": "regular", "price": 50}, {"type": "vip", "price": 120}]
    assert select_ticket_price(tiers, "backstage") == Decimal("50")
    assert select_ticket_price(tiers, None) == Decimal("50")


def test_events_without_tiers_are_free():
    assert ticket_total([], "vip", 4) == Decimal("0.00")
    assert ticket_total(None, None, 1) == Decimal("0.00")


def test_as_utc_converts_dates_and_offsets():
    assert as_utc(date(2026, 12, 20)) == datetime(2026, 12, 20, tzinfo=timezone.utc)
    assert as_utc(datetime(2026, 12, 20, 10)).tzinfo == timezone.utc
