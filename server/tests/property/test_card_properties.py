"""Property-based tests for card validation and masking."""

from datetime import date

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tourism_api.core.card_validation import (
    CardValidationError,
    is_expiry_in_past,
    mask_card_number,
    validate_card_number,
)

card_numbers = st.text(alphabet="0123456789", min_size=16, max_size=16)
wrong_lengths = st.text(alphabet="0123456789", min_size=0, max_size=30).filter(lambda s: len(s) != 16)
months = st.integers(min_value=1, max_value=12)
two_digit_years = st.integers(min_value=0, max_value=99)
days = st.dates(min_value=date(2000, 1, 1), max_value=date(2099, 12, 31))


@given(number=card_numbers)
def test_grouped_numbers_validate_to_digits(number):
    grouped = " ".join(number[i:i + 4] for i in range(0, 16, 4))

    assert validate_card_number(grouped) == number
    assert validate_card_number(grouped.replace(" ", "-")) == number


@given(number=wrong_lengths)
def test_other_lengths_are_rejected(number):
    with pytest.raises(CardValidationError):
        validate_card_number(number)


@given(number=card_numbers)
def test_mask_only_reveals_last_four(number):
    masked = mask_card_number(number)

    assert masked == f"XXXX-XXXX-XXXX-{number[-4:]}"
    assert number[:12] not in masked


@given(month=months, year=two_digit_years, today=days)
def test_expiry_in_past_matches_month_ordering(month, year, today):
    expiry = f"{month:02d}/{year:02d}"

    expected = (year, month) < (today.year % 100, today.month)
    assert is_expiry_in_past(expiry, today) is expected


non_ascii_digits = st.sampled_from("٠١٢٣٤٥٦٧٨٩۰۱۲۳۴۵۶۷۸۹०१२३४५६७८९")


@given(number=card_numbers, position=st.integers(min_value=0, max_value=15), digit=non_ascii_digits)
def test_non_ascii_digits_are_rejected(number, position, digit):
    with pytest.raises(CardValidationError):
        validate_card_number(number[:position] + digit + number[position + 1:])
