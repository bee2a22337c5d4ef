"""
Celery configuration for the ingestion workers.

Loaded by `celery_app.config_from_object("celeryconfig")` in policyhub/tasks/__init__.py.
Broker and result-backend URLs come from the shared Settings
(environment / .env), defaulting to localhost for local dev.
"""

from policyhub.core.config import settings

# ═══════════════════════════════════════════════════════════
#  Broker & Result Backend
# ═══════════════════════════════════════════════════════════

broker_url = settings.CELERY_BROKER_URL
# process_upload waits on the single result message, so results are required
result_backend = settings.CELERY_RESULT_BACKEND

# ═══════════════════════════════════════════════════════════
#  Serialization — JSON only
# ═══════════════════════════════════════════════════════════

task_serializer = "json"
result_serializer = "json"
accept_content = ["json"]

timezone = "UTC"
enable_utc = True

# ═══════════════════════════════════════════════════════════
#  Task Execution
# ═══════════════════════════════════════════════════════════

# Acknowledge after completion; a crashed worker's file is redelivered
task_acks_late = True
task_reject_on_worker_lost = True

# One ingestion at a time per worker process
worker_prefetch_multiplier = 1

# Matches INGEST_RESULT_TIMEOUT_SECONDS on the waiting side
task_soft_time_limit = 1800   # 30 min: raises SoftTimeLimitExceeded
task_time_limit = settings.INGEST_RESULT_TIMEOUT_SECONDS

# Results only need to outlive the waiting caller
result_expires = 3600

# ═══════════════════════════════════════════════════════════
#  Worker Settings
# ═══════════════════════════════════════════════════════════

# Recycle worker processes after N tasks
worker_max_tasks_per_child = 50

# Enable with: celery -A policyhub.tasks worker -E
worker_send_task_events = False
task_send_sent_event = False

# ═══════════════════════════════════════════════════════════
#  Task Routes
# ═══════════════════════════════════════════════════════════
#   celery -A policyhub.tasks worker -Q default

task_routes = {
    "policyhub.tasks.ingestion_tasks.*": {"queue": "default"},
}

task_default_queue = "default"
