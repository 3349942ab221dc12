# =============================================================================
# API Dependencies — Service Injection
# =============================================================================
#
# The DocumentAIService is created once in the application lifespan and
# stored on app.state. Handlers receive it through Depends(), and tests
# replace it with app.dependency_overrides[get_document_ai_service].
# =============================================================================

from __future__ import annotations

from fastapi import HTTPException, Request

from docai.engine.orchestrator import DocumentAIService


def get_document_ai_service(request: Request) -> DocumentAIService:
    """
    Raises:
        HTTPException 503: the lifespan has not created the service.
    """
    service = getattr(request.app.state, "document_ai", None)
    if service is None:
        raise HTTPException(
            status_code=503,
            detail="Document AI service is not initialised",
        )
    return service
