"""
Record Normalizer — maps one raw import row to canonical field groups.

Source files come from many systems, so the same logical field shows up
under different headers ("User First Name", "firstName", "first_name").
FIELD_ALIASES is the single table of accepted spellings per field; the
first alias present with a non-empty value wins.  Headers are also
matched case-insensitively as a last resort.

Missing user data gets deterministic placeholders derived from the row
number, so creation never fails purely because the sheet left a
schema-required column blank.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Mapping

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

# Logical field → accepted source headers, in priority order
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    # Agent
    "agent_name": ("Agent Name", "agentName", "agent_name", "Agent"),
    # User
    "first_name": ("User First Name", "First Name", "firstName", "first_name", "firstname"),
    "last_name": ("User Last Name", "Last Name", "lastName", "last_name", "lastname"),
    "date_of_birth": ("DOB", "Date of Birth", "dateOfBirth", "date_of_birth", "dob"),
    "street": ("Address", "Street", "address", "street"),
    "city": ("City", "city"),
    "state": ("State", "state"),
    "zip_code": ("Zip Code", "Zip", "zipCode", "zip_code", "zip"),
    "phone_number": ("Phone Number", "Phone", "phoneNumber", "phone_number", "phone"),
    "email": ("Email", "Email Address", "email", "emailAddress", "email_address"),
    "gender": ("Gender", "gender"),
    "user_type": ("User Type", "userType", "user_type"),
    # Account
    "account_name": ("Account Name", "accountName", "account_name"),
    # Category / carrier
    "category_name": (
        "Policy Category Name", "Policy Category", "categoryName", "category_name", "Category",
    ),
    "carrier_name": (
        "Carrier Company Name", "Carrier", "companyName", "company_name", "carrier_name",
    ),
    # Policy
    "policy_number": ("Policy Number", "Policy No", "policyNumber", "policy_number"),
    "policy_start_date": ("Policy Start Date", "policyStartDate", "policy_start_date", "Start Date"),
    "policy_end_date": ("Policy End Date", "policyEndDate", "policy_end_date", "End Date"),
    "collection_id": ("Collection ID", "collectionId", "collection_id"),
    "company_collection_id": (
        "Company Collection ID", "companyCollectionId", "company_collection_id",
    ),
    "premium_amount": ("Premium Amount", "Premium", "premiumAmount", "premium_amount"),
    "coverage_amount": ("Coverage Amount", "Coverage", "coverageAmount", "coverage_amount"),
    "status": ("Status", "Policy Status", "status"),
    "payment_frequency": ("Payment Frequency", "paymentFrequency", "payment_frequency"),
}

DEFAULT_DATE_OF_BIRTH = date(1990, 1, 1)
DEFAULT_PHONE = "000-000-0000"
DEFAULT_STATE = "N/A"
DEFAULT_ZIP = "00000"


def placeholder_email(row_number: int) -> str:
    return f"user{row_number}@example.com"


def placeholder_first_name(row_number: int) -> str:
    return f"User{row_number}"


# ═══════════════════════════════════════════════════════════
#  Canonical field groups
# ═══════════════════════════════════════════════════════════

@dataclass
class UserFields:
    first_name: str
    last_name: str | None
    date_of_birth: date
    street: str | None
    city: str | None
    state: str
    zip_code: str
    phone_number: str
    email: str
    gender: Gender
    user_type: UserType

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PolicyFields:
    policy_number: str
    policy_start_date: date
    policy_end_date: date
    collection_id: str | None
    company_collection_id: str | None
    premium_amount: Decimal
    coverage_amount: Decimal
    status: PolicyStatus
    payment_frequency: PaymentFrequency

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class NormalizedRecord:
    """Canonical view of one input row (row_number is 1-based)."""

    row_number: int
    user: UserFields
    policy: PolicyFields
    agent_name: str | None = None
    account_name: str | None = None
    category_name: str | None = None
    carrier_name: str | None = None


# ═══════════════════════════════════════════════════════════
#  Lookup
# ═══════════════════════════════════════════════════════════

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def pick(raw: Mapping[str, Any], field: str) -> Any:
    """First non-empty value among the aliases of `field`, or None."""
    aliases = FIELD_ALIASES[field]
    for alias in aliases:
        value = raw.get(alias)
        if not _is_blank(value):
            return value

    lowered = {
        str(key).strip().lower(): value
        for key, value in raw.items()
        if key is not None
    }
    for alias in aliases:
        value = lowered.get(alias.lower())
        if not _is_blank(value):
            return value
    return None


def pick_text(raw: Mapping[str, Any], field: str) -> str | None:
    return clean_text(pick(raw, field))


# ═══════════════════════════════════════════════════════════
#  Normalization
# ═══════════════════════════════════════════════════════════

def normalize_record(
    raw: Mapping[str, Any],
    row_number: int,
    *,
    today: date | None = None,
) -> NormalizedRecord:
    """Map one raw row to canonical groups.  Never raises on bad values."""
    today = today or date.today()

    user = UserFields(
        first_name=pick_text(raw, "first_name") or placeholder_first_name(row_number),
        last_name=pick_text(raw, "last_name"),
        date_of_birth=parse_date(pick(raw, "date_of_birth"), DEFAULT_DATE_OF_BIRTH),
        street=pick_text(raw, "street"),
        city=pick_text(raw, "city"),
        state=pick_text(raw, "state") or DEFAULT_STATE,
        zip_code=pick_text(raw, "zip_code") or DEFAULT_ZIP,
        phone_number=pick_text(raw, "phone_number") or DEFAULT_PHONE,
        email=(pick_text(raw, "email") or placeholder_email(row_number)).lower(),
        gender=normalize_gender(pick(raw, "gender")),
        user_type=normalize_user_type(pick(raw, "user_type")),
    )

    start = parse_date(pick(raw, "policy_start_date"), today)
    policy = PolicyFields(
        policy_number=pick_text(raw, "policy_number") or generate_policy_number(),
        policy_start_date=start,
        policy_end_date=parse_date(pick(raw, "policy_end_date"), add_years(start, 1)),
        collection_id=pick_text(raw, "collection_id"),
        company_collection_id=pick_text(raw, "company_collection_id"),
        premium_amount=parse_number(pick(raw, "premium_amount")),
        coverage_amount=parse_number(pick(raw, "coverage_amount")),
        status=normalize_policy_status(pick(raw, "status")),
        payment_frequency=normalize_payment_frequency(pick(raw, "payment_frequency")),
    )

    return NormalizedRecord(
        row_number=row_number,
        user=user,
        policy=policy,
        agent_name=pick_text(raw, "agent_name"),
        account_name=pick_text(raw, "account_name"),
        category_name=pick_text(raw, "category_name"),
        carrier_name=pick_text(raw, "carrier_name"),
    )
