"""
Price calculator. Pure functions, no I/O.

Money is Decimal throughout and totals are rounded half-up to cents.
"""

import math
from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional, Union

from wayfare.core.config import get_settings

CENTS = Decimal("0.01")
ONE_DAY = timedelta(days=1)

DateLike = Union[date, datetime]


def as_utc(value: DateLike) -> datetime:
    """Normalize a date or (naive or aware) datetime to an aware UTC datetime."""
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def count_nights(check_in: DateLike, check_out: DateLike) -> int:
    """Calendar nights between two dates, rounding partial days up."""
    elapsed = as_utc(check_out) - as_utc(check_in)
    return math.ceil(elapsed / ONE_DAY)


def accommodation_total(
    price_per_night: Any,
    check_in: DateLike,
    check_out: DateLike,
    service_fee_rate: Optional[Decimal] = None,
) -> Decimal:
    """price_per_night x nights, plus the service fee (10% by default)."""
    if service_fee_rate is None:
        service_fee_rate = get_settings().SERVICE_FEE_RATE
    nights = count_nights(check_in, check_out)
    base = Decimal(str(price_per_night)) * nights
    return to_money(base * (Decimal(1) + Decimal(str(service_fee_rate))))


def unit_total(unit_price: Any, quantity: int) -> Decimal:
    return to_money(Decimal(str(unit_price)) * quantity)


def select_ticket_price(ticket_types: Optional[Iterable[dict]], ticket_type: Optional[str]) -> Decimal:
    """
    Unit price of the tier named `ticket_type`, falling back to the first
    tier. Events without tiers are free.
    """
    tiers = [tier for tier in (ticket_types or []) if isinstance(tier, dict)]
    if not tiers:
        return Decimal("0")
    chosen = next((tier for tier in tiers if tier.get("type") == ticket_type), tiers[0])
    return Decimal(str(chosen.get("price", 0)))


def ticket_total(ticket_types: Optional[Iterable[dict]], ticket_type: Optional[str], quantity: int) -> Decimal:
    return unit_total(select_ticket_price(ticket_types, ticket_type), quantity)
