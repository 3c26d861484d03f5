"""
Database Engine and Session Management

**What**: Declarative base, async engine and per-request sessions
**Why**: Every query in the service runs on an explicitly passed AsyncSession
**How**: The engine and sessionmaker are built lazily from Settings; `get_db`
yields one session per request and closes it afterwards

**Usage**:
```python
@router.get("/datasets")
async def list_datasets(db: AsyncSession = Depends(get_db)):
    ...
```
"""

from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from expression_db.config import get_settings


class Base(AsyncAttrs, DeclarativeBase):
    """
    Declarative base for all models.

    AsyncAttrs gives every model `awaitable_attrs`, so relations can be
    traversed from async code: `await gene.awaitable_attrs.transcripts`.
    """


_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_engine() -> AsyncEngine:
    """Get or create the async engine configured by Settings.database_url."""
    global _engine

    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.database_url,
            echo=settings.database_echo,
            pool_pre_ping=True,
        )

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory bound to the engine."""
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )

    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request. Closing it rolls back uncommitted work."""
    session_factory = get_session_factory()
    async with session_factory() as session:
        yield session


async def init_db(engine: Optional[AsyncEngine] = None) -> None:
    """
    Create all tables.

    Only for local development and tests; production schemas are managed
    outside this service.
    """
    # Import models so they register on Base.metadata
    import expression_db.models  # noqa: F401

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
