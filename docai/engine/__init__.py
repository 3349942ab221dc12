# =============================================================================
# Engine Package — Execution Core
# =============================================================================
#   - errors.py:       exception taxonomy (validation, provider, terminal)
#   - executor.py:     ResilientExecutor (timeout, backoff, one fallback)
#   - orchestrator.py: DocumentAIService, the LangGraph execution pipeline
# =============================================================================
