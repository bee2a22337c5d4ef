"""Cell value parsers."""

import re
from datetime import date, datetime
from decimal import Decimal

import pytest

from policyhub.core.constants import Gender, PaymentFrequency, PolicyStatus, UserType
from policyhub.processing.parsers import (
    add_years,
    clean_text,
    generate_policy_number,
    normalize_gender,
    normalize_payment_frequency,
    normalize_policy_status,
    normalize_user_type,
    parse_date,
    parse_number,
)

DEFAULT = date(2000, 1, 1)


class TestParseDate:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("03/15/2024", date(2024, 3, 15)),
            ("2024-03-15", date(2024, 3, 15)),
            ("03-15-2024", date(2024, 3, 15)),
            ("2024/03/15", date(2024, 3, 15)),
            ("2024-03-15T10:30:00Z", date(2024, 3, 15)),
            (datetime(2024, 3, 15, 8, 0), date(2024, 3, 15)),
            (date(2024, 3, 15), date(2024, 3, 15)),
            (45366, date(2024, 3, 15)),
            ("January 15, 2024", date(2024, 1, 15)),
            ("15 Jan 2024", date(2024, 1, 15)),
            ("Mon, 15 Jan 2024 09:00:00 GMT", date(2024, 1, 15)),
        ],
    )
    def test_accepted_shapes(self, value, expected):
        assert parse_date(value, DEFAULT) == expected

    @pytest.mark.parametrize("value", [None, "", "not a date", "13/45/2024", True, -5])
    def test_unparsable_returns_default(self, value):
        assert parse_date(value, DEFAULT) == DEFAULT

    def test_add_years_handles_leap_day(self):
        assert add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)
        assert add_years(date(2024, 6, 1), 1) == date(2025, 6, 1)


class TestParseNumber:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("$1,200.50", Decimal("1200.50")),
            ("  300 ", Decimal("300")),
            ("₹ 5,000", Decimal("5000")),
            (42, Decimal("42")),
            (12.5, Decimal("12.5")),
        ],
    )
    def test_parses_amounts(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value", [None, "", "n/a", "1.2.3", float("nan")])
    def test_unparsable_is_zero(self, value):
        assert parse_number(value) == Decimal("0")


class TestEnums:
    def test_gender(self):
        assert normalize_gender("M") == Gender.MALE
        assert normalize_gender("f") == Gender.FEMALE
        assert normalize_gender("FEMALE") == Gender.FEMALE
        assert normalize_gender("male") == Gender.MALE
        assert normalize_gender("prefer not to say") == Gender.OTHER
        assert normalize_gender(None) == Gender.OTHER

    def test_user_type(self):
        assert normalize_user_type("corporate client") == UserType.CORPORATE
        assert normalize_user_type("BUSINESS") == UserType.BUSINESS
        assert normalize_user_type("fam") == UserType.FAMILY
        assert normalize_user_type("unknown") == UserType.INDIVIDUAL
        assert normalize_user_type("") == UserType.INDIVIDUAL

    def test_policy_status(self):
        assert normalize_policy_status("cancelled") == PolicyStatus.CANCELLED
        assert normalize_policy_status("Canceled") == PolicyStatus.CANCELLED
        assert normalize_policy_status("PENDING") == PolicyStatus.PENDING
        assert normalize_policy_status("weird") == PolicyStatus.ACTIVE

    def test_payment_frequency(self):
        assert normalize_payment_frequency("semi annual") == PaymentFrequency.SEMI_ANNUAL
        assert normalize_payment_frequency("semi_annual") == PaymentFrequency.SEMI_ANNUAL
        assert normalize_payment_frequency("Quarterly") == PaymentFrequency.QUARTERLY
        assert normalize_payment_frequency("yearly") == PaymentFrequency.ANNUAL
        assert normalize_payment_frequency(None) == PaymentFrequency.MONTHLY


def test_clean_text_renders_integral_floats():
    assert clean_text(12345.0) == "12345"
    assert clean_text("  x ") == "x"
    assert clean_text("   ") is None


def test_generated_policy_numbers_are_unique_and_shaped():
    numbers = {generate_policy_number() for _ in range(50)}
    assert len(numbers) == 50
    for number in numbers:
        assert re.fullmatch(r"POL-\d{13}-[0-9A-Z]{8}", number)
