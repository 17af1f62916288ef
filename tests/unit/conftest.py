# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit test fixtures: an in-memory class store and a fixed clock."""

from datetime import datetime, timezone
from typing import Any, Sequence

import pytest

from src.core.config.settings import SchedulingSettings
from src.domains.class_.service import ClassService
from src.domains.enrollment.service import EnrollmentService
from src.models.class_ import ClassOccurrence

# Monday 18:00 UTC
SERIES_START = datetime(2025, 1, 6, 18, 0, tzinfo=timezone.utc)


class InMemoryClassRepository:
    """Dict-backed stand-in for ClassRepository with the same contract."""

    def __init__(self, max_batch_size: int = 500) -> None:
        self.max_batch_size = max_batch_size
        self.documents: dict[str, ClassOccurrence] = {}
        self.writes: list[tuple[str, list[str]]] = []

    async def get(self, class_id: str) -> ClassOccurrence | None:
        occurrence = self.documents.get(class_id)
        return occurrence.model_copy(deep=True) if occurrence else None

    async def list_by_series(self, series_id: str, starts_from: datetime | None = None):
        return self._select(lambda o: o.series_id == series_id, starts_from)

    async def list_by_school(self, school_id: str, starts_from: datetime | None = None):
        return self._select(lambda o: o.school_id == school_id, starts_from)

    async def create(self, occurrence: ClassOccurrence) -> ClassOccurrence:
        return (await self.create_many([occurrence]))[0]

    async def create_many(self, occurrences: Sequence[ClassOccurrence]) -> list[ClassOccurrence]:
        for occurrence in occurrences:
            self.documents[occurrence.id] = occurrence.model_copy(deep=True)
        self.writes.append(("create", [o.id for o in occurrences]))
        return list(occurrences)

    async def update(self, class_id: str, patch: dict[str, Any]) -> int:
        return await self.update_many([class_id], patch)

    async def update_many(self, class_ids: Sequence[str], patch: dict[str, Any]) -> int:
        changed = 0
        for class_id in class_ids:
            if class_id in self.documents:
                self.documents[class_id] = self.documents[class_id].model_copy(update=patch)
                changed += 1
        self.writes.append(("update", list(class_ids)))
        return changed

    async def delete(self, class_id: str) -> int:
        return await self.delete_many([class_id])

    async def delete_many(self, class_ids: Sequence[str]) -> int:
        removed = sum(1 for class_id in class_ids if self.documents.pop(class_id, None))
        self.writes.append(("delete", list(class_ids)))
        return removed

    async def add_member(self, class_ids: Sequence[str], user_id: str) -> None:
        for class_id in class_ids:
            self.documents[class_id].enrolled_students.add(user_id)
        self.writes.append(("add_member", list(class_ids)))

    async def remove_member(self, class_ids: Sequence[str], user_id: str) -> None:
        for class_id in class_ids:
            self.documents[class_id].enrolled_students.discard(user_id)
        self.writes.append(("remove_member", list(class_ids)))

    def ordered(self) -> list[ClassOccurrence]:
        return sorted(self.documents.values(), key=lambda o: (o.scheduled_at, o.id))

    def _select(self, predicate, starts_from: datetime | None) -> list[ClassOccurrence]:
        return [
            o.model_copy(deep=True)
            for o in self.ordered()
            if predicate(o) and (starts_from is None or o.scheduled_at >= starts_from)
        ]


class FixedClock:
    """Settable clock for services that read the current time."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def repository():
    """Empty in-memory class store."""
    return InMemoryClassRepository()


@pytest.fixture
def clock():
    """Clock frozen one hour before the first occurrence of the sample series."""
    return FixedClock(datetime(2025, 1, 6, 17, 0, tzinfo=timezone.utc))


@pytest.fixture
def class_service(repository, clock):
    """ClassService over the in-memory store."""
    return ClassService(repository, SchedulingSettings(), clock)


@pytest.fixture
def enrollment_service(repository):
    """EnrollmentService over the in-memory store."""
    return EnrollmentService(repository)
