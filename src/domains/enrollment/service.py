# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service for managing student class enrollments.

This module provides the EnrollmentService class for:
- Enrolling a student in one occurrence or this-and-future occurrences
- Withdrawing a student the same way
- The single-occurrence capacity pre-check

Series-wide cascades reach same-series occurrences scheduled at or after
the targeted occurrence (``CascadeCutoff.FROM_OCCURRENCE``), not at or
after the current time as update and delete do.

Capacity is not checked here. Callers run ``ensure_capacity`` on the
occurrence they show the user before enrolling; a series-wide enrollment
can therefore fill other occurrences beyond ``max_students``.
"""

from __future__ import annotations

import logging

from src.domains.class_.exceptions import ClassNotFoundError
from src.domains.class_.repository import ClassRepository
from src.domains.class_.series import CascadeCutoff, resolve_cascade_scope
from src.models.class_ import ClassOccurrence
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class EnrollmentServiceError(Exception):
    """Base exception for enrollment service errors."""

    pass


class ClassFullError(EnrollmentServiceError):
    """Raised when an occurrence has no spot left."""

    def __init__(self, class_id: str, max_students: int) -> None:
        self.class_id = class_id
        self.max_students = max_students
        super().__init__(f"Class '{class_id}' is full ({max_students} students)")


class EnrollmentService:
    """Service for managing class memberships.

    Attributes:
        repository: Class store facade.
    """

    def __init__(self, repository: ClassRepository) -> None:
        """Initialize enrollment service.

        Args:
            repository: Class store facade.
        """
        self.repository = repository

    async def enroll(
        self,
        class_id: str,
        user_id: str,
        apply_to_series: bool = False,
    ) -> list[str]:
        """Add a student to one occurrence or this-and-future occurrences.

        Enrolling an already-enrolled student is a no-op.

        Args:
            class_id: Targeted occurrence.
            user_id: Student to add.
            apply_to_series: Also enroll in later occurrences of the series.

        Returns:
            IDs of the occurrences the student is now enrolled in.

        Raises:
            ClassNotFoundError: If class not found.
        """
        target = await self._get_class(class_id)
        scope = await resolve_cascade_scope(
            self.repository, target, apply_to_series, CascadeCutoff.FROM_OCCURRENCE, utc_now()
        )

        await self.repository.add_member(scope, user_id)

        logger.info(
            "Enrolled student: student=%s, class=%s, occurrences=%d",
            user_id,
            class_id,
            len(scope),
        )
        return scope

    async def unenroll(
        self,
        class_id: str,
        user_id: str,
        apply_to_series: bool = False,
    ) -> list[str]:
        """Remove a student from one occurrence or this-and-future occurrences.

        Removing a student who is not enrolled is a no-op.

        Args:
            class_id: Targeted occurrence.
            user_id: Student to remove.
            apply_to_series: Also withdraw from later occurrences of the series.

        Returns:
            IDs of the occurrences the student was withdrawn from.

        Raises:
            ClassNotFoundError: If class not found.
        """
        target = await self._get_class(class_id)
        scope = await resolve_cascade_scope(
            self.repository, target, apply_to_series, CascadeCutoff.FROM_OCCURRENCE, utc_now()
        )

        await self.repository.remove_member(scope, user_id)

        logger.info(
            "Withdrew student: student=%s, class=%s, occurrences=%d",
            user_id,
            class_id,
            len(scope),
        )
        return scope

    @staticmethod
    def ensure_capacity(occurrence: ClassOccurrence) -> None:
        """Reject enrollment in an occurrence that is already full.

        Raises:
            ClassFullError: If enrolled students reach max_students.
        """
        if occurrence.is_full:
            logger.warning(
                "Class full: class=%s, enrolled=%d, max=%d",
                occurrence.id,
                len(occurrence.enrolled_students),
                occurrence.max_students,
            )
            raise ClassFullError(occurrence.id, occurrence.max_students)

    async def _get_class(self, class_id: str) -> ClassOccurrence:
        occurrence = await self.repository.get(class_id)
        if occurrence is None:
            raise ClassNotFoundError(class_id)
        return occurrence
