"""Record schemas validated before rows are written."""

from policyhub.schemas.entities import (
    AccountCreate,
    AgentCreate,
    CarrierCreate,
    CategoryCreate,
    PolicyCreate,
    UserCreate,
)

__all__ = [
    "AccountCreate",
    "AgentCreate",
    "CarrierCreate",
    "CategoryCreate",
    "PolicyCreate",
    "UserCreate",
]
