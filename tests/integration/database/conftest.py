# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest fixtures for database integration tests.

Provides an engine on a fresh schema and a session factory for testing.
Set TEST_DATABASE_URL to a disposable PostgreSQL database to run them.
"""

import os

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from src.infrastructure.database.connection import build_sessionmaker
from src.infrastructure.database.models import Base


@pytest.fixture(scope="session")
def test_db_url() -> str | None:
    """Get database URL for tests."""
    return os.environ.get("TEST_DATABASE_URL")


@pytest_asyncio.fixture(scope="function")
async def db_engine(test_db_url: str | None):
    """Create async engine with every table dropped and recreated."""
    if not test_db_url:
        pytest.skip("TEST_DATABASE_URL is not set")

    engine = create_async_engine(test_db_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def db_sessionmaker(db_engine):
    """Session factory configured like the production one."""
    return build_sessionmaker(db_engine)
