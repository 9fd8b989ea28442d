"""
Core pytest configuration for the entire test suite.

Only the essentials that every kind of test needs live here: logging, the test
database engine and a transactional session. Domain fixtures (repositories,
services, sample data, the HTTP client) are in `tests/test_fixtures/` and are
imported at the bottom of this module so they are available everywhere.
"""

from __future__ import annotations

import logging
import os
from typing import AsyncGenerator
from urllib.parse import urlparse

# -------------------------------
# Early logging tuning
# -------------------------------
# Silence noisy third-party loggers before they are imported.
NOISY_LOGGERS = (
    "faker",
    "faker.factory",
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "aiosqlite",
    "asyncio",
    "httpx",
    "httpcore",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import classroom.models  # noqa: F401  registers ClassSection on Base.metadata
from classroom.core.logging.builder import setup_logging
from classroom.database.base import Base
from classroom.tests.test_fixtures.settings import TEST_SETTINGS

logger = logging.getLogger(__name__)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Install the application logging configuration once for the whole session."""
    setup_logging(TEST_SETTINGS)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    yield


# ------------------------------------------------------------------------------------------------
# Test database URL
# ------------------------------------------------------------------------------------------------

def safe_log_db_url(db_url: str) -> str:
    """Drop credentials from a database URL before logging it."""
    parsed = urlparse(db_url)
    return f"{parsed.scheme}://{parsed.hostname or ''}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


def get_test_database_url() -> str:
    """
    1. `TEST_DATABASE_URL` environment variable (CI against Postgres)
    2. the app's DATABASE_URL when TEST_POSTGRES_DB is configured
    3. an in-memory SQLite database
    """
    if test_url := os.getenv("TEST_DATABASE_URL"):
        return test_url

    if TEST_SETTINGS.TEST_POSTGRES_DB:
        return TEST_SETTINGS.DATABASE_URL

    return "sqlite+aiosqlite://"


TEST_DATABASE_URL = get_test_database_url()
logger.info(f"Using test DB: {safe_log_db_url(TEST_DATABASE_URL)}")


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


# ------------------------------------------------------------------------------------------------
# Database fixtures
# ------------------------------------------------------------------------------------------------

@pytest.fixture()
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    if _is_sqlite(TEST_DATABASE_URL):
        # One shared in-memory connection, so every session sees the same tables
        engine = create_async_engine(
            TEST_DATABASE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

        # pysqlite's own transaction handling breaks SAVEPOINTs; emit BEGIN ourselves
        @event.listens_for(engine.sync_engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _emit_begin(conn):
            conn.exec_driver_sql("BEGIN")
    else:
        engine = create_async_engine(TEST_DATABASE_URL, pool_pre_ping=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    Transaction-per-test.

    The session joins an outer transaction on a dedicated connection and turns its own
    commit()/rollback() into SAVEPOINT release/rollback, so service code can commit
    freely while everything is still undone at the end of the test.
    """
    async with async_engine.connect() as connection:
        outer = await connection.begin()

        maker = async_sessionmaker(
            bind=connection,
            class_=AsyncSession,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )
        session = maker()
        try:
            yield session
        finally:
            await session.close()
            if outer.is_active:
                await outer.rollback()


# Domain fixtures, registered globally
from classroom.tests.test_fixtures.section_fixtures import (  # noqa: E402,F401
    api_client,
    create_section,
    make_section_payload,
    many_sections,
    sample_section_data,
    section_repository,
    section_service,
    test_app,
)
