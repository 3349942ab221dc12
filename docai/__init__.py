# =============================================================================
# Document AI Execution Engine
# =============================================================================
# Runs document-processing operations (summaries, flashcards, legal scans,
# ...) against a pool of LLM providers, picking the provider tier per
# operation and account type, bounding input to each operation's token cap,
# caching results by content fingerprint, and retrying transient failures.
#
# Package structure:
#   docai/
#   ├── api/          → FastAPI route handlers (execute, stats, cache, health)
#   ├── engine/       → Execution pipeline (LangGraph orchestrator, resilient
#   │                    executor, error taxonomy)
#   ├── db/           → Database engine, session, and usage ledger ORM model
#   ├── models/       → Pydantic V2 request/response/options/result schemas
#   ├── services/     → Leaf components (operation registry, routing, token
#   │                    budget, prompts, cache, parser, metrics, providers)
#   └── workers/      → Celery tasks for multi-part (large document) runs
# =============================================================================
