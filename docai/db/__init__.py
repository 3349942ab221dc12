# =============================================================================
# Database Package
# =============================================================================
# Usage ledger persistence (PostgreSQL).
#
# Key exports:
#   - async_session_factory / get_sync_session (engine.py)
#   - Base, DocumentAIUsage: ORM models (models.py)
# =============================================================================
