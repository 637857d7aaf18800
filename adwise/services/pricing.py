"""
Booking cost calculation.

Cost is pro-rated from the billboard's monthly rate over a 30-day month and
rounded half-up to whole rupees.
"""
import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from adwise.core.errors import InvalidRange

DAYS_PER_MONTH = 30
SECONDS_PER_DAY = 86400

DateLike = Union[date, datetime]


def booking_days(start_date: DateLike, end_date: DateLike) -> int:
    """Whole days covered by the range, partial days rounded up."""
    if end_date <= start_date:
        raise InvalidRange(
            "End date must be after start date",
            details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )
    delta = end_date - start_date
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def calculate_total_cost(start_date: DateLike, end_date: DateLike, monthly_price: float) -> int:
    if monthly_price is None or monthly_price <= 0:
        raise ValueError("monthly_price must be positive")
    days = booking_days(start_date, end_date)
    raw = Decimal(str(monthly_price)) * days / DAYS_PER_MONTH
    return int(raw.quantize(Decimal(1), rounding=ROUND_HALF_UP))
