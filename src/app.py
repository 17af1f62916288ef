# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application factory.

This module wires ClassBook together for a host process: logging, the
connection pool, the identity provider and the published AppState.

Example:
    >>> async with lifespan() as state:
    ...     await state.sign_in("ana@school.com", "secret123")
    ...     print([c.title for c in state.classes])
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from src.core.config import Settings, get_settings
from src.domains.app import AppState
from src.domains.auth import IdentityService, PasswordHasher
from src.infrastructure.database import (
    close_database,
    create_tables,
    get_sessionmaker,
    init_database,
)
from src.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app_state(settings: Settings | None = None) -> AppState:
    """Build an AppState on the initialized connection pool.

    Raises:
        DatabaseError: If init_database() has not been called.
    """
    settings = settings or get_settings()
    sessionmaker = get_sessionmaker()
    identity = IdentityService(
        sessionmaker,
        hasher=PasswordHasher(rounds=settings.auth.bcrypt_rounds),
        min_password_length=settings.auth.min_password_length,
    )
    return AppState(sessionmaker, identity, settings=settings)


@asynccontextmanager
async def lifespan(
    settings: Settings | None = None,
    create_schema: bool = False,
) -> AsyncIterator[AppState]:
    """Application lifespan manager.

    Handles startup and shutdown for a host process.
    Initializes and cleans up:
    - Logging
    - Database connection pool (and tables, if ``create_schema``)

    Args:
        settings: Application settings; cached settings if omitted.
        create_schema: Create missing tables on startup.

    Yields:
        AppState for the lifetime of the process.
    """
    settings = settings or get_settings()
    setup_logging(settings)
    logger.info(
        "Starting ClassBook",
        extra={"environment": settings.environment, "debug": settings.debug},
    )

    # =========================================================================
    # Startup
    # =========================================================================

    await init_database(settings)
    logger.info("Database connection initialized")

    if create_schema:
        await create_tables()
        logger.info("Database tables created")

    try:
        yield create_app_state(settings)
    finally:
        # =====================================================================
        # Shutdown
        # =====================================================================
        await close_database()
        logger.info("Database connection closed")
        logger.info("Shutting down ClassBook")
