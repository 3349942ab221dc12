# =============================================================================
# Celery Application Configuration
# =============================================================================
#
# Large documents (more than DOCAI_BATCH_MIN_CHARS characters) are executed
# part by part in a worker instead of inside an HTTP request:
#
# ┌──────────┐     ┌───────┐     ┌───────────────┐     ┌────────┐
# │ producer │────▶│ Redis │────▶│ Celery Worker │────▶│ Redis  │
# │          │     │(broker)│    │ (per-part     │     │(result)│
# └──────────┘     └───────┘     │  execute())   │     └────────┘
#    db 0 ──────────┘            └───────────────┘        └── db 1
#
# Result cache entries (cache_backend=redis) live in db 2.
# =============================================================================

from celery import Celery

from docai.config import settings

celery_app = Celery(
    "docai.workers",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    # --- Serialization ---
    # JSON only: pickle can execute arbitrary code on deserialization.
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    # --- Reliability ---
    # Acknowledge after completion so a crashed worker's task is re-queued.
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    # One task at a time per worker process: parts are long-running.
    worker_prefetch_multiplier=1,

    # --- Timeouts ---
    # A part can take up to (max_retries + 2) provider timeouts plus
    # backoff; a 40-part document needs far more than that in total.
    task_soft_time_limit=1800,
    task_time_limit=2100,

    # --- Results ---
    result_expires=3600,

    include=["docai.workers.tasks"],
)
