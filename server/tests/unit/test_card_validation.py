"""Tests for card detail validation and token helpers."""

from datetime import date, timedelta

import jwt
import pytest

from tourism_api.core.security import create_access_token, decode_access_token, hash_password, verify_password
from tourism_api.core.card_validation import (
    CardValidationError,
    parse_expiry,
    validate_card_holder,
    validate_cvv,
    validate_email,
    validate_expiry,
)


def test_parse_expiry():
    assert parse_expiry("07/31") == (7, 31)


@pytest.mark.parametrize("value", ["7/31", "13/30", "00/30", "07-31", "0731", ""])
def test_parse_expiry_rejects_bad_format(value):
    with pytest.raises(CardValidationError, match="MM/YY"):
        parse_expiry(value)


def test_expiry_current_month_is_still_valid():
    assert validate_expiry("10/26", today=date(2026, 10, 19)) == "10/26"


def test_expiry_last_month_is_expired():
    with pytest.raises(CardValidationError, match="expired"):
        validate_expiry("09/26", today=date(2026, 10, 19))


@pytest.mark.parametrize("value", ["123", "1234"])
def test_cvv_accepts_three_or_four_digits(value):
    assert validate_cvv(value) == value


@pytest.mark.parametrize("value", ["12", "12345", "12a"])
def test_cvv_rejects_other_values(value):
    with pytest.raises(CardValidationError):
        validate_cvv(value)


def test_card_holder_is_trimmed():
    assert validate_card_holder("  Jane Traveller ") == "Jane Traveller"


@pytest.mark.parametrize("value", ["", "   ", "J4ne", "Jane-Traveller"])
def test_card_holder_rejects_non_letters(value):
    with pytest.raises(CardValidationError):
        validate_card_holder(value)


@pytest.mark.parametrize("value", ["a@b.co", "jane.traveller@example.lk"])
def test_email_accepts_plausible_addresses(value):
    assert validate_email(value) == value


@pytest.mark.parametrize("value", ["jane", "jane@", "jane@example", "ja ne@example.com"])
def test_email_rejects_invalid_addresses(value):
    with pytest.raises(CardValidationError):
        validate_email(value)


def test_password_hash_round_trip():
    hashed = hash_password("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_verify_password_with_malformed_hash():
    assert verify_password("secret123", "not-a-bcrypt-hash") is False


def test_expired_token_is_rejected():
    token = create_access_token("user-1", "jane", "jane@example.com", "user", expires_delta=timedelta(seconds=-60))

    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(token)
