"""Shared constants and enums used across the application."""

from enum import StrEnum


class Gender(StrEnum):
    """Gender values accepted on a User record."""

    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class UserType(StrEnum):
    """Kind of policy holder."""

    INDIVIDUAL = "Individual"
    BUSINESS = "Business"
    FAMILY = "Family"
    CORPORATE = "Corporate"


class AccountType(StrEnum):
    """Role of a UserAccount for its owning user."""

    PRIMARY = "Primary"
    SECONDARY = "Secondary"
    JOINT = "Joint"


class PolicyStatus(StrEnum):
    """Lifecycle status of a Policy."""

    ACTIVE = "Active"
    EXPIRED = "Expired"
    CANCELLED = "Cancelled"
    PENDING = "Pending"


class PaymentFrequency(StrEnum):
    """Premium payment cadence."""

    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    SEMI_ANNUAL = "Semi-Annual"
    ANNUAL = "Annual"


class TaskStatus(StrEnum):
    """Status of a scheduled task.  Everything except PENDING is terminal."""

    PENDING = "pending"
    EXECUTED = "executed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class PipelineStatus(StrEnum):
    """Overall status of an ingestion run."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class StepStatus(StrEnum):
    """Status of an individual pipeline step."""

    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class FileFormat(StrEnum):
    """Tabular input formats the ingestion pipeline can decode."""

    STRUCTURED_CSV = "STRUCTURED_CSV"
    STRUCTURED_XLSX = "STRUCTURED_XLSX"
    STRUCTURED_XLS = "STRUCTURED_XLS"


class EntityKind(StrEnum):
    """Entity kinds resolved by natural key during ingestion."""

    AGENT = "agent"
    USER = "user"
    ACCOUNT = "account"
    CATEGORY = "category"
    CARRIER = "carrier"
    POLICY = "policy"
