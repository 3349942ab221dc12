# =============================================================================
# Workers Package — Celery Background Tasks
# =============================================================================
#   - celery_app.py: Celery application and configuration
#   - tasks.py:      process_document_parts (large-document execution)
# =============================================================================
