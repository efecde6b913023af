"""
Database session management.

WHY: Async database sessions are required for FastAPI's async/await pattern.
Using a context manager ensures proper connection cleanup and transaction management.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from workspace_sso.core.config import settings
from workspace_sso.core.exceptions import ResourceAlreadyExistsError


logger = logging.getLogger(__name__)


# Create async engine
# WHY: pool_pre_ping ensures stale connections are recycled, preventing
# "server has gone away" errors in long-running applications.
engine = create_async_engine(
    settings.async_database_url,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    pool_size=10,
    max_overflow=20,
)

# Create session factory
# WHY: expire_on_commit=False prevents lazy-loading issues after commit.
# autoflush=False gives explicit control over when writes hit the database.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.

    WHY: FastAPI dependency injection ensures each request gets its own
    database session, with automatic cleanup via context manager.
    The try/except/finally ensures proper transaction handling even on errors.

    Yields:
        AsyncSession: Database session for the request
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a block of writes as one all-or-nothing unit.

    WHY: Provisioning creates users, workspaces and memberships and then
    checks the license. Any failure in between must leave no trace, even
    though the request session has already been used for reads. A
    SAVEPOINT gives the block its own rollback boundary inside the
    request transaction; get_db commits the outer transaction afterwards.

    Lost uniqueness races (two first sign-ins for one email) surface as
    ResourceAlreadyExistsError after the savepoint is rolled back.

    Args:
        session: Request-scoped session

    Yields:
        The same session, inside the savepoint
    """
    try:
        async with session.begin_nested():
            yield session
            await session.flush()
    except IntegrityError as e:
        logger.warning("Provisioning conflicted with a concurrent write: %s", e.orig)
        raise ResourceAlreadyExistsError(
            message="Account is already being provisioned, please retry",
        )
