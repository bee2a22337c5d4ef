"""
Async SQLAlchemy session factory.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from policyhub.core.config import settings


def make_engine(database_url: str | None = None, **kwargs) -> AsyncEngine:
    """Build an async engine.  Workers call this per task to avoid loop conflicts."""
    return create_async_engine(database_url or settings.DATABASE_URL, **kwargs)


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory with the project-wide session options."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=(settings.APP_ENV == "development"),
    pool_size=20,
    max_overflow=10,
    pool_pre_ping=True,
)

async_session = make_session_factory(engine)

