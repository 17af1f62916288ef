# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Typed access to the class store.

Each public method runs in its own transaction: the ``*_many`` writes and
the membership updates are all-or-nothing, but consecutive calls are not
isolated from one another. Field updates overwrite without a concurrency
token. Membership changes are applied server-side
(``INSERT ... ON CONFLICT DO NOTHING`` / ``DELETE``), so concurrent
enroll/unenroll calls never lose each other's updates.

Example:
    >>> repository = ClassRepository(get_sessionmaker(), max_batch_size=500)
    >>> occurrence = await repository.get(class_id)
    >>> await repository.add_member([occurrence.id], user_id)
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domains.class_.exceptions import BatchLimitExceededError
from src.infrastructure.database.connection import session_scope
from src.infrastructure.database.models import Class, ClassEnrollment
from src.models.class_ import ClassOccurrence

logger = logging.getLogger(__name__)

PATCHABLE_FIELDS = frozenset(
    {
        "teacher_id",
        "title",
        "level",
        "description",
        "scheduled_at",
        "duration",
        "max_students",
        "is_recurring",
    }
)


class ClassRepository:
    """Store facade for class occurrences and their enrollments.

    Attributes:
        _sessionmaker: Factory for per-call sessions.
        _max_batch_size: Upper bound on documents per atomic write.
    """

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        max_batch_size: int = 500,
    ) -> None:
        self._sessionmaker = sessionmaker
        self._max_batch_size = max_batch_size

    @property
    def max_batch_size(self) -> int:
        return self._max_batch_size

    # =========================================================================
    # Reads
    # =========================================================================

    async def get(self, class_id: str) -> ClassOccurrence | None:
        """Load one occurrence, or None if it does not exist."""
        async with session_scope(self._sessionmaker) as session:
            result = await session.execute(select(Class).where(Class.id == class_id))
            model = result.scalar_one_or_none()
            return ClassOccurrence.model_validate(model) if model else None

    async def list_by_series(
        self,
        series_id: str,
        starts_from: datetime | None = None,
    ) -> list[ClassOccurrence]:
        """Occurrences carrying ``series_id``, optionally from an instant on."""
        stmt = select(Class).where(Class.series_id == series_id)
        if starts_from is not None:
            stmt = stmt.where(Class.scheduled_at >= starts_from)
        return await self._fetch(stmt)

    async def list_by_school(
        self,
        school_id: str,
        starts_from: datetime | None = None,
    ) -> list[ClassOccurrence]:
        """Occurrences of a school, optionally from an instant on."""
        stmt = select(Class).where(Class.school_id == school_id)
        if starts_from is not None:
            stmt = stmt.where(Class.scheduled_at >= starts_from)
        return await self._fetch(stmt)

    async def _fetch(self, stmt) -> list[ClassOccurrence]:
        async with session_scope(self._sessionmaker) as session:
            result = await session.execute(stmt.order_by(Class.scheduled_at, Class.id))
            return [ClassOccurrence.model_validate(m) for m in result.scalars().all()]

    # =========================================================================
    # Writes
    # =========================================================================

    async def create(self, occurrence: ClassOccurrence) -> ClassOccurrence:
        """Persist a single occurrence."""
        created = await self.create_many([occurrence])
        return created[0]

    async def create_many(self, occurrences: Sequence[ClassOccurrence]) -> list[ClassOccurrence]:
        """Persist occurrences in one atomic write."""
        if not occurrences:
            return []
        self._check_batch_size(len(occurrences))

        async with session_scope(self._sessionmaker) as session:
            session.add_all([self._to_model(o) for o in occurrences])

        logger.debug("Created %d class documents", len(occurrences))
        return list(occurrences)

    async def update(self, class_id: str, patch: dict[str, Any]) -> int:
        """Apply ``patch`` to one occurrence. Returns the number of rows changed."""
        return await self.update_many([class_id], patch)

    async def update_many(self, class_ids: Sequence[str], patch: dict[str, Any]) -> int:
        """Apply the same ``patch`` to every listed occurrence atomically."""
        if not class_ids:
            return 0
        unknown = set(patch) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be patched: {sorted(unknown)}")
        if not patch:
            return 0
        self._check_batch_size(len(class_ids))

        async with session_scope(self._sessionmaker) as session:
            result = await session.execute(
                update(Class)
                .where(Class.id.in_(list(class_ids)))
                .values(**patch)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount

    async def delete(self, class_id: str) -> int:
        """Remove one occurrence. Returns the number of rows removed."""
        return await self.delete_many([class_id])

    async def delete_many(self, class_ids: Sequence[str]) -> int:
        """Remove every listed occurrence atomically, enrollments included."""
        if not class_ids:
            return 0
        self._check_batch_size(len(class_ids))

        async with session_scope(self._sessionmaker) as session:
            result = await session.execute(
                delete(Class)
                .where(Class.id.in_(list(class_ids)))
                .execution_options(synchronize_session=False)
            )
            return result.rowcount

    async def add_member(self, class_ids: Sequence[str], user_id: str) -> None:
        """Set-union ``user_id`` into the membership of each occurrence.

        Idempotent: an existing membership is left as is.
        """
        if not class_ids:
            return
        self._check_batch_size(len(class_ids))

        stmt = (
            pg_insert(ClassEnrollment)
            .values([{"class_id": class_id, "user_id": user_id} for class_id in class_ids])
            .on_conflict_do_nothing(index_elements=["class_id", "user_id"])
        )
        async with session_scope(self._sessionmaker) as session:
            await session.execute(stmt)

    async def remove_member(self, class_ids: Sequence[str], user_id: str) -> None:
        """Set-remove ``user_id`` from the membership of each occurrence.

        Removing a non-member is a no-op.
        """
        if not class_ids:
            return
        self._check_batch_size(len(class_ids))

        async with session_scope(self._sessionmaker) as session:
            await session.execute(
                delete(ClassEnrollment).where(
                    ClassEnrollment.class_id.in_(list(class_ids)),
                    ClassEnrollment.user_id == user_id,
                )
            )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _check_batch_size(self, size: int) -> None:
        if size > self._max_batch_size:
            logger.error(
                "Refusing batch write of %d documents (limit %d)",
                size,
                self._max_batch_size,
            )
            raise BatchLimitExceededError(size, self._max_batch_size)

    @staticmethod
    def _to_model(occurrence: ClassOccurrence) -> Class:
        return Class(
            id=occurrence.id,
            series_id=occurrence.series_id,
            school_id=occurrence.school_id,
            teacher_id=occurrence.teacher_id,
            title=occurrence.title,
            level=occurrence.level.value,
            description=occurrence.description,
            scheduled_at=occurrence.scheduled_at,
            duration=occurrence.duration,
            max_students=occurrence.max_students,
            is_recurring=occurrence.is_recurring,
            enrollments=[
                ClassEnrollment(user_id=user_id) for user_id in sorted(occurrence.enrolled_students)
            ],
        )
