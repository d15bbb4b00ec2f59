"""Card detail validation and masking.

These checks run on every payment submission before anything is stored.
They are pure functions so the same rules apply to cart, event and tour
payments alike.
"""

import re
from datetime import date
from typing import Optional

CARD_NUMBER_LENGTH = 16

_EXPIRY_PATTERN = re.compile(r"^(0[1-9]|1[0-2])/([0-9]{2})$")
_CARD_HOLDER_PATTERN = re.compile(r"^[a-zA-Z\s]+$")
_CARD_NUMBER_PATTERN = re.compile(rf"[0-9]{{{CARD_NUMBER_LENGTH}}}")
_CVV_PATTERN = re.compile(r"^[0-9]{3,4}$")
_EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


class CardValidationError(ValueError):
    """Raised when a card detail fails validation."""


def normalize_card_number(card_number: str) -> str:
    """Strip spaces and dashes a user may type between digit groups."""
    return re.sub(r"[\s-]", "", card_number or "")


def validate_card_number(card_number: str) -> str:
    """
    Validate a card number and return it without separators.

    Raises:
        CardValidationError: If the number is not exactly 16 ASCII digits
    """
    digits = normalize_card_number(card_number)
    if not _CARD_NUMBER_PATTERN.fullmatch(digits):
        raise CardValidationError("Card number must be 16 digits")
    return digits


def validate_card_holder(card_holder: str) -> str:
    holder = (card_holder or "").strip()
    if not holder or not _CARD_HOLDER_PATTERN.match(holder):
        raise CardValidationError("Card holder name should only contain letters and spaces")
    return holder


def parse_expiry(expiry_date: str) -> tuple[int, int]:
    """
    Parse an ``MM/YY`` expiry into ``(month, two_digit_year)``.

    Raises:
        CardValidationError: If the value is not in MM/YY format
    """
    match = _EXPIRY_PATTERN.match((expiry_date or "").strip())
    if not match:
        raise CardValidationError("Expiry date must be in MM/YY format")
    return int(match.group(1)), int(match.group(2))


def is_expiry_in_past(expiry_date: str, today: Optional[date] = None) -> bool:
    """Return True if the card expired before the current month.

    A card is valid through the last day of its expiry month, so the current
    month itself is not in the past.
    """
    month, year = parse_expiry(expiry_date)
    today = today or date.today()
    current_year = today.year % 100
    if year < current_year:
        return True
    return year == current_year and month < today.month


def validate_expiry(expiry_date: str, today: Optional[date] = None) -> str:
    if is_expiry_in_past(expiry_date, today):
        raise CardValidationError("Card has expired")
    return expiry_date.strip()


def validate_cvv(cvv: str) -> str:
    if not _CVV_PATTERN.match((cvv or "").strip()):
        raise CardValidationError("CVV must be 3 or 4 digits")
    return cvv.strip()


def validate_email(email: str) -> str:
    if not _EMAIL_PATTERN.match((email or "").strip()):
        raise CardValidationError("Please enter a valid email address")
    return email.strip()


def mask_card_number(card_number: str) -> str:
    """Mask all but the last four digits, e.g. ``XXXX-XXXX-XXXX-1234``."""
    digits = normalize_card_number(card_number)
    return f"XXXX-XXXX-XXXX-{digits[-4:]}"
