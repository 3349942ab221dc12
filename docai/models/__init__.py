# =============================================================================
# Models Package — Pydantic V2 Schemas
# =============================================================================
#   - options.py:  closed per-family options models (validated at the boundary)
#   - requests.py: ExecutionRequest, the single input of DocumentAIService
#   - responses.py: ExecutionResponse and the admin/stat response shapes
#   - results.py:  tagged union of structured (JSON-shaped) results
# =============================================================================
