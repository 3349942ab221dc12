# =============================================================================
# API Package — FastAPI Route Handlers
# =============================================================================
#   - document_ai.py: /document-ai/* (execute, operations, stats, cache, health)
#   - deps.py:        dependency that hands handlers the service instance
# =============================================================================
