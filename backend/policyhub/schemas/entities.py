"""
Creation schemas for the insurance entities.

Repositories accept these models, so every insert is validated the
same way regardless of whether it comes from a bulk import or a script.
A `pydantic.ValidationError` here is an ordinary creation failure,
distinct from a uniqueness conflict raised by the database.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from policyhub.core.constants import (
    AccountType,
    Gender,
    PaymentFrequency,
    PolicyStatus,
    UserType,
)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class _EntitySchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True)


class AgentCreate(_EntitySchema):
    agent_name: str = Field(..., min_length=1, max_length=100)
    agent_code: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=320)
    phone: str | None = Field(None, max_length=50)
    department: str | None = Field(None, max_length=100)


class UserCreate(_EntitySchema):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str | None = Field(None, max_length=50)
    date_of_birth: date
    street: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field("USA", max_length=100)
    phone_number: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., max_length=320, pattern=EMAIL_PATTERN)
    gender: Gender = Gender.OTHER
    user_type: UserType = UserType.INDIVIDUAL

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.lower()


class AccountCreate(_EntitySchema):
    account_name: str = Field(..., min_length=1, max_length=100)
    user_id: int
    account_number: str | None = Field(None, max_length=50)
    account_type: AccountType = AccountType.PRIMARY


class CategoryCreate(_EntitySchema):
    category_name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    category_code: str | None = Field(None, max_length=50)

    @field_validator("category_code")
    @classmethod
    def _upper_code(cls, value: str | None) -> str | None:
        return value.upper() if value else value


class CarrierCreate(_EntitySchema):
    company_name: str = Field(..., min_length=1, max_length=100)
    company_code: str | None = Field(None, max_length=50)
    street: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    zip_code: str | None = Field(None, max_length=20)
    phone: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=320)
    website: str | None = Field(None, max_length=255)
    license_number: str | None = Field(None, max_length=100)

    @field_validator("company_code")
    @classmethod
    def _upper_code(cls, value: str | None) -> str | None:
        return value.upper() if value else value


class PolicyCreate(_EntitySchema):
    policy_number: str = Field(..., min_length=1, max_length=100)
    policy_start_date: date
    policy_end_date: date
    user_id: int
    category_id: int
    carrier_id: int
    agent_id: int | None = None
    collection_id: str | None = Field(None, max_length=100)
    company_collection_id: str | None = Field(None, max_length=100)
    premium_amount: Decimal = Field(Decimal("0"), ge=0)
    coverage_amount: Decimal = Field(Decimal("0"), ge=0)
    status: PolicyStatus = PolicyStatus.ACTIVE
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY

    @model_validator(mode="after")
    def _end_after_start(self) -> "PolicyCreate":
        if self.policy_end_date <= self.policy_start_date:
            raise ValueError("policy_end_date must be after policy_start_date")
        return self
