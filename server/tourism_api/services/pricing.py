"""Cart pricing rules."""

import math
from datetime import datetime
from typing import Iterable, Optional, Protocol

SECONDS_PER_DAY = 24 * 60 * 60


class PricedLine(Protocol):
    price: float
    quantity: int
    is_rental: bool
    start_date: Optional[datetime]
    end_date: Optional[datetime]


def rental_days(start_date: datetime, end_date: datetime) -> int:
    """
    Number of billable rental days between two instants.

    Partial days round up and every rental bills at least one day.
    """
    elapsed = (end_date - start_date).total_seconds() / SECONDS_PER_DAY
    return max(1, math.ceil(elapsed))


def line_total(
    price: float,
    quantity: int,
    is_rental: bool = False,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> float:
    """Total for one cart line.

    Purchases cost ``price * quantity``; rentals with both dates cost
    ``price * quantity * rental_days``.
    """
    total = price * quantity
    if is_rental and start_date is not None and end_date is not None:
        total *= rental_days(start_date, end_date)
    return total


def item_total(item: PricedLine) -> float:
    return line_total(item.price, item.quantity, item.is_rental, item.start_date, item.end_date)


def cart_totals(items: Iterable[PricedLine]) -> dict[str, float]:
    """Return total, rental and purchase subtotals for a set of cart lines."""
    rental_subtotal = 0.0
    purchase_subtotal = 0.0
    for item in items:
        if item.is_rental:
            rental_subtotal += item_total(item)
        else:
            purchase_subtotal += item_total(item)
    return {
        "total_price": round(rental_subtotal + purchase_subtotal, 2),
        "rental_subtotal": round(rental_subtotal, 2),
        "purchase_subtotal": round(purchase_subtotal, 2),
    }
