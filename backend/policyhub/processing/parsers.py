"""
Value parsers for spreadsheet / CSV cells.

Every parser is total: bad input falls back to a caller-supplied or
fixed default instead of raising, so one sloppy cell never fails a row.
"""

from __future__ import annotations

import math
import re
import secrets
import string
import time
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from email.utils import parsedate_to_datetime
from typing import Any

from dateutil import parser as date_parser

from policyhub.core.constants import Gender, PaymentFrequency, PolicyStatus, UserType

# Tried in order before ISO-8601, RFC 2822 and free-form fallbacks
DATE_FORMATS: tuple[str, ...] = ("%m/%d/%Y", "%Y-%m-%d", "%m-%d-%Y", "%Y/%m/%d")

# Day zero of the spreadsheet serial-date system (1900 leap-year bug included)
EXCEL_EPOCH = date(1899, 12, 30)
MAX_EXCEL_SERIAL = 2958465  # 9999-12-31

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_ENUM_KEY_JUNK = re.compile(r"[\s\-_]")
_BASE36 = string.digits + string.ascii_lowercase


def clean_text(value: Any) -> str | None:
    """Cell value → stripped string, or None when empty."""
    if value is None:
        return None
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        # Numeric cells such as policy numbers come back as 12345.0
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    text = str(value).strip()
    return text or None


# ─── Dates ────────────────────────────────────
def parse_date(value: Any, default: date) -> date:
    """Parse a cell into a date; unparsable input returns `default`."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        if 0 < value <= MAX_EXCEL_SERIAL:
            return EXCEL_EPOCH + timedelta(days=int(value))
        return default

    text = str(value).strip()
    if not text:
        return default

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    try:
        return parsedate_to_datetime(text).date()
    except (TypeError, ValueError, IndexError):
        pass

    # Written-out months: "January 15, 2024", "15 Jan 2024"
    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError):
        return default


def add_years(start: date, years: int) -> date:
    """Same calendar day `years` later (Feb 29 → Feb 28)."""
    try:
        return start.replace(year=start.year + years)
    except ValueError:
        return start.replace(year=start.year + years, day=28)


# ─── Numbers ──────────────────────────────────
def parse_number(value: Any) -> Decimal:
    """Parse an amount, stripping currency symbols, commas and whitespace."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, (int, Decimal)):
        number = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            return Decimal("0")
        number = Decimal(str(value))
    else:
        cleaned = _NON_NUMERIC.sub("", str(value))
        try:
            number = Decimal(cleaned)
        except InvalidOperation:
            return Decimal("0")
    return number if number.is_finite() else Decimal("0")


# ─── Enums ────────────────────────────────────
def normalize_gender(value: Any) -> Gender:
    """Free-text gender → Gender, defaulting to Other."""
    text = (clean_text(value) or "").lower()
    if not text:
        return Gender.OTHER
    if text == "m":
        return Gender.MALE
    if text == "f":
        return Gender.FEMALE
    # "female" contains "male", so it is checked first
    for candidate in (Gender.FEMALE, Gender.MALE, Gender.OTHER):
        if candidate.value.lower() in text:
            return candidate
    return Gender.OTHER


def normalize_user_type(value: Any) -> UserType:
    """Free-text user type → UserType, defaulting to Individual."""
    text = (clean_text(value) or "").lower()
    if not text:
        return UserType.INDIVIDUAL
    for candidate in (UserType.CORPORATE, UserType.BUSINESS, UserType.FAMILY, UserType.INDIVIDUAL):
        name = candidate.value.lower()
        if name in text or (len(text) >= 3 and text in name):
            return candidate
    return UserType.INDIVIDUAL


_STATUS_KEYS: dict[str, PolicyStatus] = {
    **{_ENUM_KEY_JUNK.sub("", s.value.lower()): s for s in PolicyStatus},
    "canceled": PolicyStatus.CANCELLED,
    "lapsed": PolicyStatus.EXPIRED,
}

_FREQUENCY_KEYS: dict[str, PaymentFrequency] = {
    **{_ENUM_KEY_JUNK.sub("", f.value.lower()): f for f in PaymentFrequency},
    "month": PaymentFrequency.MONTHLY,
    "quarter": PaymentFrequency.QUARTERLY,
    "halfyearly": PaymentFrequency.SEMI_ANNUAL,
    "semiannually": PaymentFrequency.SEMI_ANNUAL,
    "annually": PaymentFrequency.ANNUAL,
    "yearly": PaymentFrequency.ANNUAL,
}


def normalize_policy_status(value: Any) -> PolicyStatus:
    text = clean_text(value)
    if not text:
        return PolicyStatus.ACTIVE
    return _STATUS_KEYS.get(_ENUM_KEY_JUNK.sub("", text.lower()), PolicyStatus.ACTIVE)


def normalize_payment_frequency(value: Any) -> PaymentFrequency:
    text = clean_text(value)
    if not text:
        return PaymentFrequency.MONTHLY
    return _FREQUENCY_KEYS.get(_ENUM_KEY_JUNK.sub("", text.lower()), PaymentFrequency.MONTHLY)


# ─── Identifiers ──────────────────────────────
def random_base36(length: int) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_policy_number() -> str:
    """Synthesize a policy number: millisecond timestamp + random suffix."""
    return f"POL-{int(time.time() * 1000)}-{random_base36(8).upper()}"
