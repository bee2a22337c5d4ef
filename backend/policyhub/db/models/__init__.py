"""
Models package — re-exports Base and all models.

Import models here so Alembic's `target_metadata = Base.metadata`
picks up every table automatically.

When adding a new model:
    1. Create `policyhub/db/models/<table_name>.py`
    2. Import it here
"""

from policyhub.db.models.base import Base
from policyhub.db.models.agent import Agent
from policyhub.db.models.ingestion_run import IngestionRun
from policyhub.db.models.policy import Policy
from policyhub.db.models.policy_carrier import PolicyCarrier
from policyhub.db.models.policy_category import PolicyCategory
from policyhub.db.models.scheduled_task import ScheduledTask
from policyhub.db.models.user import User
from policyhub.db.models.user_account import UserAccount

__all__ = [
    "Base",
    "Agent",
    "IngestionRun",
    "Policy",
    "PolicyCarrier",
    "PolicyCategory",
    "ScheduledTask",
    "User",
    "UserAccount",
]
