# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class service for scheduling class occurrences.

This module provides the ClassService class for:
- Creating a single class or a weekly series
- Updating or deleting one occurrence or this-and-future occurrences
- Listing a school's upcoming classes
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from src.core.config.settings import SchedulingSettings
from src.domains.class_.exceptions import ClassNotFoundError
from src.domains.class_.recurrence import generate_occurrences, series_horizon
from src.domains.class_.repository import ClassRepository
from src.domains.class_.series import CascadeCutoff, assign_series_ids, resolve_cascade_scope
from src.infrastructure.database.models import new_id
from src.models.class_ import ClassCreateRequest, ClassOccurrence, ClassUpdateRequest
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class ClassService:
    """Service for managing class occurrences and their series.

    Update and delete cascades reach same-series occurrences scheduled at
    or after the current time (``CascadeCutoff.FROM_NOW``).

    Attributes:
        repository: Class store facade.
        settings: Recurrence configuration.
        clock: Source of the current time.
    """

    def __init__(
        self,
        repository: ClassRepository,
        settings: SchedulingSettings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize class service.

        Args:
            repository: Class store facade.
            settings: Recurrence configuration; defaults apply if omitted.
            clock: Returns the current UTC time.
        """
        self.repository = repository
        self.settings = settings or SchedulingSettings()
        self.clock = clock

    async def create_class(self, request: ClassCreateRequest) -> list[ClassOccurrence]:
        """Create a class, or every occurrence of a weekly series.

        Args:
            request: Class draft.

        Returns:
            Created occurrences in chronological order.

        Raises:
            BatchLimitExceededError: If the series is larger than one batch.
        """
        template = ClassOccurrence(id=new_id(), **request.model_dump())

        if not request.is_recurring:
            created = await self.repository.create(template)
            logger.info("Created class: %s (%s)", created.title, created.id)
            return [created]

        dates = generate_occurrences(
            request.scheduled_at,
            series_horizon(request.scheduled_at, self.settings.horizon_years),
            timedelta(days=self.settings.recurrence_interval_days),
        )
        occurrences = assign_series_ids(
            [
                template.model_copy(update={"id": new_id(), "scheduled_at": when}, deep=True)
                for when in dates
            ]
        )
        created = await self.repository.create_many(occurrences)

        logger.info(
            "Created recurring class: %s, occurrences=%d, series=%s",
            request.title,
            len(created),
            created[-1].series_id,
        )
        return created

    async def get_class(self, class_id: str) -> ClassOccurrence:
        """Get an occurrence by ID.

        Raises:
            ClassNotFoundError: If class not found.
        """
        occurrence = await self.repository.get(class_id)
        if occurrence is None:
            raise ClassNotFoundError(class_id)
        return occurrence

    async def list_upcoming_classes(self, school_id: str) -> list[ClassOccurrence]:
        """Occurrences of a school scheduled at or after now, soonest first."""
        return await self.repository.list_by_school(school_id, starts_from=self.clock())

    async def update_class(
        self,
        class_id: str,
        request: ClassUpdateRequest,
        apply_to_series: bool = False,
    ) -> list[str]:
        """Update one occurrence or this-and-future occurrences.

        Args:
            class_id: Targeted occurrence.
            request: Fields to overwrite.
            apply_to_series: Also patch future occurrences of the series.

        Returns:
            IDs of the patched occurrences.

        Raises:
            ClassNotFoundError: If class not found.
        """
        target = await self.get_class(class_id)
        scope = await resolve_cascade_scope(
            self.repository, target, apply_to_series, CascadeCutoff.FROM_NOW, self.clock()
        )

        patch = request.to_patch()
        if scope == [target.id]:
            updated = await self.repository.update(target.id, patch)
            if not updated:
                raise ClassNotFoundError(class_id)
        else:
            await self.repository.update_many(scope, patch)

        logger.info(
            "Updated class: %s, occurrences=%d, fields=%s",
            class_id,
            len(scope),
            sorted(patch),
        )
        return scope

    async def delete_class(self, class_id: str, apply_to_series: bool = False) -> list[str]:
        """Delete one occurrence or this-and-future occurrences.

        Args:
            class_id: Targeted occurrence.
            apply_to_series: Also delete future occurrences of the series.

        Returns:
            IDs of the deleted occurrences.

        Raises:
            ClassNotFoundError: If class not found.
        """
        target = await self.get_class(class_id)
        scope = await resolve_cascade_scope(
            self.repository, target, apply_to_series, CascadeCutoff.FROM_NOW, self.clock()
        )

        if scope == [target.id]:
            await self.repository.delete(target.id)
        else:
            await self.repository.delete_many(scope)

        logger.info("Deleted class: %s, occurrences=%d", class_id, len(scope))
        return scope
