# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for ClassService.

Series behaviour is checked against the in-memory store; the repository
call pattern is checked with an AsyncMock.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from src.core.config.settings import SchedulingSettings
from src.domains.class_.exceptions import ClassNotFoundError
from src.domains.class_.service import ClassService
from src.models.class_ import ClassCreateRequest, ClassLevel, ClassOccurrence, ClassUpdateRequest

# Monday 18:00 UTC, one hour after the frozen clock
SERIES_START = datetime(2025, 1, 6, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def recurring_request(sample_class_data):
    return ClassCreateRequest(**sample_class_data, scheduled_at=SERIES_START, is_recurring=True)


@pytest.fixture
def single_request(sample_class_data):
    return ClassCreateRequest(**sample_class_data, scheduled_at=SERIES_START)


class TestClassServiceCreate:
    """Tests for class creation."""

    @pytest.mark.asyncio
    async def test_create_single_class(self, class_service, repository, single_request):
        created = await class_service.create_class(single_request)

        assert len(created) == 1
        assert created[0].series_id is None
        assert created[0].scheduled_at == SERIES_START
        assert created[0].title == "Yoga Basics"
        assert list(repository.documents) == [created[0].id]

    @pytest.mark.asyncio
    async def test_create_weekly_series(self, class_service, repository, recurring_request):
        created = await class_service.create_class(recurring_request)

        assert len(created) >= 52
        assert created[0].series_id is None
        markers = {o.series_id for o in created[1:]}
        assert len(markers) == 1 and None not in markers
        assert all(b.scheduled_at - a.scheduled_at == timedelta(days=7) for a, b in zip(created, created[1:]))
        assert len(repository.documents) == len(created)

    @pytest.mark.asyncio
    async def test_series_is_written_in_one_batch(self, class_service, repository, recurring_request):
        created = await class_service.create_class(recurring_request)

        assert repository.writes == [("create", [o.id for o in created])]

    @pytest.mark.asyncio
    async def test_occurrences_copy_every_template_field(self, class_service, recurring_request):
        created = await class_service.create_class(recurring_request)

        assert {(o.title, o.duration, o.max_students, o.level) for o in created} == {
            ("Yoga Basics", 60, 10, ClassLevel.BEGINNER)
        }
        assert len({o.id for o in created}) == len(created)

    @pytest.mark.asyncio
    async def test_horizon_follows_settings(self, repository, clock, recurring_request):
        service = ClassService(
            repository,
            SchedulingSettings(recurrence_interval_days=14, horizon_years=1),
            clock,
        )

        created = await service.create_class(recurring_request)

        assert len(created) == 27
        assert created[1].scheduled_at - created[0].scheduled_at == timedelta(days=14)

    @pytest.mark.asyncio
    async def test_create_single_uses_create(self, single_request):
        repository = AsyncMock()
        repository.create.side_effect = lambda occurrence: occurrence
        service = ClassService(repository)

        await service.create_class(single_request)

        repository.create.assert_awaited_once()
        repository.create_many.assert_not_called()


class TestClassServiceGet:
    """Tests for lookups."""

    @pytest.mark.asyncio
    async def test_get_class_not_found(self, class_service):
        with pytest.raises(ClassNotFoundError) as exc_info:
            await class_service.get_class("missing")

        assert exc_info.value.class_id == "missing"

    @pytest.mark.asyncio
    async def test_list_upcoming_excludes_past(self, class_service, clock, recurring_request):
        created = await class_service.create_class(recurring_request)
        clock.now = SERIES_START + timedelta(weeks=2, minutes=1)

        upcoming = await class_service.list_upcoming_classes(recurring_request.school_id)

        assert [o.id for o in upcoming] == [o.id for o in created[3:]]

    @pytest.mark.asyncio
    async def test_list_upcoming_other_school_empty(self, class_service, recurring_request):
        await class_service.create_class(recurring_request)

        assert await class_service.list_upcoming_classes("another-school") == []


class TestClassServiceUpdate:
    """Tests for single and series-wide updates."""

    @pytest.mark.asyncio
    async def test_update_single_occurrence(self, class_service, repository, recurring_request):
        created = await class_service.create_class(recurring_request)

        updated = await class_service.update_class(created[3].id, ClassUpdateRequest(title="Yin Yoga"))

        assert updated == [created[3].id]
        titles = {o.id: o.title for o in repository.documents.values()}
        assert titles[created[3].id] == "Yin Yoga"
        assert sum(1 for t in titles.values() if t == "Yin Yoga") == 1

    @pytest.mark.asyncio
    async def test_series_update_from_first_occurrence_touches_only_it(
        self, class_service, repository, recurring_request
    ):
        created = await class_service.create_class(recurring_request)

        updated = await class_service.update_class(
            created[0].id, ClassUpdateRequest(max_students=20), apply_to_series=True
        )

        assert updated == [created[0].id]
        changed = [o.id for o in repository.documents.values() if o.max_students == 20]
        assert changed == [created[0].id]

    @pytest.mark.asyncio
    async def test_series_update_reaches_future_occurrences_from_now(
        self, class_service, repository, clock, recurring_request
    ):
        created = await class_service.create_class(recurring_request)
        clock.now = SERIES_START + timedelta(weeks=4, hours=1)

        updated = await class_service.update_class(
            created[3].id, ClassUpdateRequest(level=ClassLevel.ADVANCED), apply_to_series=True
        )

        expected = [o.id for o in created[5:]]
        assert updated == expected
        advanced = {o.id for o in repository.documents.values() if o.level == ClassLevel.ADVANCED}
        assert advanced == set(expected)

    @pytest.mark.asyncio
    async def test_series_update_is_one_write(self, class_service, repository, recurring_request):
        created = await class_service.create_class(recurring_request)
        repository.writes.clear()

        await class_service.update_class(
            created[1].id, ClassUpdateRequest(duration=90), apply_to_series=True
        )

        assert len(repository.writes) == 1
        assert repository.writes[0][0] == "update"

    @pytest.mark.asyncio
    async def test_update_missing_class(self, class_service):
        with pytest.raises(ClassNotFoundError):
            await class_service.update_class("missing", ClassUpdateRequest(title="x"))

    @pytest.mark.asyncio
    async def test_update_vanished_between_read_and_write(self, sample_class_data):
        occurrence = ClassOccurrence(id="c-1", scheduled_at=SERIES_START, **sample_class_data)
        repository = AsyncMock()
        repository.get.return_value = occurrence
        repository.update.return_value = 0
        service = ClassService(repository)

        with pytest.raises(ClassNotFoundError):
            await service.update_class("c-1", ClassUpdateRequest(title="x"))

    @pytest.mark.asyncio
    async def test_update_description_can_be_cleared(self, class_service, repository, single_request):
        created = await class_service.create_class(single_request)

        await class_service.update_class(created[0].id, ClassUpdateRequest(description=None))

        assert repository.documents[created[0].id].description is None


class TestClassServiceDelete:
    """Tests for single and series-wide deletes."""

    @pytest.mark.asyncio
    async def test_delete_single_occurrence(self, class_service, repository, recurring_request):
        created = await class_service.create_class(recurring_request)

        deleted = await class_service.delete_class(created[2].id)

        assert deleted == [created[2].id]
        assert created[2].id not in repository.documents
        assert len(repository.documents) == len(created) - 1

    @pytest.mark.asyncio
    async def test_series_delete_from_first_occurrence_keeps_series(
        self, class_service, repository, recurring_request
    ):
        created = await class_service.create_class(recurring_request)

        deleted = await class_service.delete_class(created[0].id, apply_to_series=True)

        assert deleted == [created[0].id]
        assert len(repository.documents) == len(created) - 1

    @pytest.mark.asyncio
    async def test_series_delete_removes_future_and_refresh_excludes_them(
        self, class_service, repository, clock, recurring_request
    ):
        created = await class_service.create_class(recurring_request)
        clock.now = SERIES_START + timedelta(weeks=9, hours=1)

        deleted = await class_service.delete_class(created[10].id, apply_to_series=True)

        assert deleted == [o.id for o in created[10:]]
        assert set(repository.documents) == {o.id for o in created[:10]}
        assert await class_service.list_upcoming_classes(recurring_request.school_id) == []

    @pytest.mark.asyncio
    async def test_delete_missing_class(self, class_service):
        with pytest.raises(ClassNotFoundError):
            await class_service.delete_class("missing", apply_to_series=True)
