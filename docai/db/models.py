# =============================================================================
# Database Models — SQLAlchemy ORM
# =============================================================================
#
# ┌────────────────────────────────┐
# │  document_ai_usage             │
# ├────────────────────────────────┤
# │ id (PK)                        │
# │ user_id, document_id           │
# │ operation, tier                │
# │ provider, model                │
# │ input/output/total_tokens      │
# │ cost_usd                       │
# │ retry_count, part_number       │
# │ processing_time_ms, cache_key  │
# │ created_at                     │
# └────────────────────────────────┘
#
# One row per successful, non-cached execute() call: the debit the billing
# side reads. Cache hits and failed calls never write a row.
#
# DESIGN DECISION: user_id / document_id are opaque strings with no foreign
# keys. Users and documents live in the calling system's database.
# =============================================================================

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base class."""

    pass


class DocumentAIUsage(Base):
    """Token and cost debit for one provider-served execution."""

    __tablename__ = "document_ai_usage"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )

    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    document_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    operation: Mapped[str] = mapped_column(String(100), nullable=False)

    # Tier that actually answered: "fallback" when the routed tier failed
    tier: Mapped[str] = mapped_column(String(20), nullable=False)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    model: Mapped[str] = mapped_column(String(200), nullable=False)

    # --- Token counts ---
    input_tokens: Mapped[int] = mapped_column(Integer, nullable=False)
    output_tokens: Mapped[int] = mapped_column(Integer, nullable=False)
    total_tokens: Mapped[int] = mapped_column(Integer, nullable=False)

    # --- Cost (USD, 0 for free users) ---
    cost_usd: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    retry_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Set when the request was one part of a split document
    part_number: Mapped[int | None] = mapped_column(Integer, nullable=True)

    processing_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cache_key: Mapped[str | None] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<DocumentAIUsage(id={self.id}, operation={self.operation}, "
            f"tokens={self.total_tokens}, cost={self.cost_usd})>"
        )


# Billing reads: one user's debits over a period
usage_user_created_idx = Index(
    "idx_document_ai_usage_user_created",
    DocumentAIUsage.user_id,
    DocumentAIUsage.created_at,
)
