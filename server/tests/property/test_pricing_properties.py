"""Property-based tests for cart pricing."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from hypothesis import given
from hypothesis import strategies as st

from tourism_api.services.pricing import cart_totals, line_total, rental_days

prices = st.floats(min_value=0, max_value=10_000, allow_nan=False, allow_infinity=False)
quantities = st.integers(min_value=1, max_value=100)
starts = st.datetimes(min_value=datetime(2020, 1, 1), max_value=datetime(2040, 1, 1))
durations = st.timedeltas(min_value=timedelta(seconds=1), max_value=timedelta(days=365))


@dataclass
class Line:
    price: float
    quantity: int
    is_rental: bool = False
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


@st.composite
def cart_lines(draw):
    is_rental = draw(st.booleans())
    start = draw(starts) if is_rental else None
    end = start + draw(durations) if is_rental else None
    return Line(draw(prices), draw(quantities), is_rental, start, end)


@given(start=starts, duration=durations)
def test_rental_days_is_at_least_one_and_covers_duration(start, duration):
    days = rental_days(start, start + duration)

    assert days >= 1
    assert timedelta(days=days) >= duration
    assert timedelta(days=days - 1) < duration


@given(price=prices, quantity=quantities)
def test_purchase_total_is_price_times_quantity(price, quantity):
    assert line_total(price, quantity) == price * quantity


@given(price=prices, quantity=quantities, start=starts, duration=durations)
def test_rental_costs_at_least_one_purchase(price, quantity, start, duration):
    rental = line_total(price, quantity, True, start, start + duration)

    assert rental >= line_total(price, quantity)


@given(lines=st.lists(cart_lines(), max_size=20))
def test_cart_total_is_sum_of_subtotals(lines):
    totals = cart_totals(lines)

    assert totals["rental_subtotal"] >= 0
    assert totals["purchase_subtotal"] >= 0
    assert abs(totals["total_price"] - (totals["rental_subtotal"] + totals["purchase_subtotal"])) <= 0.011


@given(lines=st.lists(cart_lines(), max_size=20))
def test_purchase_subtotal_ignores_rentals(lines):
    purchases = [line for line in lines if not line.is_rental]

    assert cart_totals(lines)["purchase_subtotal"] == cart_totals(purchases)["purchase_subtotal"]
