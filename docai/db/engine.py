# =============================================================================
# Database Engine & Session Management
# =============================================================================
#
# Two engines against the same database:
#   - async (asyncpg)  — used by the FastAPI process through
#                        async_session_factory
#   - sync (psycopg2)  — used by Celery workers, which are synchronous and
#                        cannot drive the async engine
#
# Both are created lazily: the ledger is optional (DOCAI_LEDGER_ENABLED),
# and a deployment without it never opens a database connection.
# =============================================================================

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session, sessionmaker

from docai.config import settings

_async_engine = None
_async_session_factory = None
_sync_engine = None
_sync_session_factory = None


# ---------------------------------------------------------------------------
# Async Engine — FastAPI
# ---------------------------------------------------------------------------
# expire_on_commit=False: attributes stay readable after commit without a
# new query, which would fail outside the session in async code.
# ---------------------------------------------------------------------------


def get_async_session_factory() -> async_sessionmaker[AsyncSession]:
    """Lazily create and cache the async session factory."""
    global _async_engine, _async_session_factory
    if _async_session_factory is None:
        _async_engine = create_async_engine(
            settings.database_url,
            echo=settings.debug,
            pool_size=5,
            max_overflow=10,
        )
        _async_session_factory = async_sessionmaker(
            bind=_async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _async_session_factory


async def dispose_async_engine() -> None:
    """Close pooled connections (application shutdown)."""
    global _async_engine, _async_session_factory
    if _async_engine is not None:
        await _async_engine.dispose()
    _async_engine = None
    _async_session_factory = None


# ---------------------------------------------------------------------------
# Sync Engine — Celery Workers
# ---------------------------------------------------------------------------


def _get_sync_session_factory() -> sessionmaker[Session]:
    """Lazily create the psycopg2 engine and its session factory."""
    global _sync_engine, _sync_session_factory
    if _sync_session_factory is None:
        _sync_engine = create_engine(
            settings.database_url_sync,
            echo=settings.debug,
            pool_size=2,
            max_overflow=0,
        )
        _sync_session_factory = sessionmaker(bind=_sync_engine, expire_on_commit=False)
    return _sync_session_factory


@contextmanager
def get_sync_session() -> Generator[Session, None, None]:
    """
    One transaction on the sync engine: committed when the block exits,
    rolled back if it raises.

        with get_sync_session() as session:
            session.add(row)
    """
    with _get_sync_session_factory()() as session, session.begin():
        yield session
