# =============================================================================
# Services Package — Building Blocks of the Engine
# =============================================================================
#   - operations.py:   static operation registry (tiers, caps, free flags)
#   - routing.py:      (operation, is_paid_user) → tier profile
#   - token_budget.py: chars-per-token estimate, head+tail truncation, splits
#   - prompts.py:      per-operation prompt templates
#   - llm.py:          provider protocol + Anthropic / OpenAI-compatible adapters
#   - pricing.py:      USD prices per 1M tokens, cost estimates
#   - cache.py:        result cache (in-memory or Redis)
#   - parser.py:       raw text → tagged structured result
#   - metrics.py:      per-service counters
#   - ledger.py:       usage debits (PostgreSQL)
# =============================================================================
