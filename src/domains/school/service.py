# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School service for school management.

This module provides the SchoolService that handles:
- School creation by a teacher
- School listing and lookup
- Teacher membership (``teacher_ids`` only ever grows)

Example:
    >>> school_service = SchoolService(db_session)
    >>> school = await school_service.create_school(request, teacher_id=user.id)
    >>> schools = await school_service.list_schools()
"""

import logging

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import School, SchoolTeacher, User
from src.models.school import SchoolCreateRequest, SchoolResponse
from src.models.user import UserRole

logger = logging.getLogger(__name__)


class SchoolServiceError(Exception):
    """Base exception for school service errors."""

    pass


class SchoolNotFoundError(SchoolServiceError):
    """Raised when a school is not found."""

    pass


class SchoolPermissionError(SchoolServiceError):
    """Raised when a non-teacher tries a teacher-only school operation."""

    pass


class SchoolService:
    """Service for managing schools.

    Attributes:
        _db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize the school service.

        Args:
            db: Async database session.
        """
        self._db = db

    async def create_school(
        self,
        request: SchoolCreateRequest,
        teacher_id: str,
    ) -> SchoolResponse:
        """Create a school owned by a teacher.

        The teacher becomes the first entry of ``teacher_ids`` and is attached
        to the new school, in the same transaction.

        Args:
            request: School creation request.
            teacher_id: ID of the teacher creating the school.

        Returns:
            Created school response.

        Raises:
            SchoolPermissionError: If the creator is unknown or not a teacher.
        """
        teacher = await self._get_user_by_id(teacher_id)
        if not teacher or teacher.role != UserRole.TEACHER.value:
            raise SchoolPermissionError(f"User {teacher_id} is not a teacher")

        school = School(
            name=request.name,
            address=request.address,
            email=request.email,
            logo=request.logo,
            instagram=request.instagram,
            teachers=[SchoolTeacher(user_id=teacher_id)],
        )
        self._db.add(school)
        await self._db.flush()

        teacher.school_id = school.id
        await self._db.flush()

        response = SchoolResponse.model_validate(school)
        await self._db.commit()

        logger.info("School created: %s (%s) by %s", school.name, school.id, teacher_id)
        return response

    async def list_schools(self) -> list[SchoolResponse]:
        """List every school, sorted by name."""
        result = await self._db.execute(select(School).order_by(School.name.asc()))
        return [SchoolResponse.model_validate(s) for s in result.scalars().all()]

    async def get_school(self, school_id: str) -> SchoolResponse:
        """Get school by ID.

        Raises:
            SchoolNotFoundError: If school not found.
        """
        school = await self._get_by_id(school_id)
        if not school:
            raise SchoolNotFoundError(f"School {school_id} not found")
        return SchoolResponse.model_validate(school)

    async def add_teacher(self, school_id: str, user_id: str) -> SchoolResponse:
        """Add a teacher to ``teacher_ids``. Adding a member again is a no-op.

        Raises:
            SchoolNotFoundError: If school not found.
        """
        school = await self._get_by_id(school_id)
        if not school:
            raise SchoolNotFoundError(f"School {school_id} not found")

        await self._db.execute(
            pg_insert(SchoolTeacher)
            .values(school_id=school_id, user_id=user_id)
            .on_conflict_do_nothing(index_elements=["school_id", "user_id"])
        )
        await self._db.commit()

        logger.info("Teacher %s added to school %s", user_id, school_id)
        return await self.get_school(school_id)

    async def _get_by_id(self, school_id: str) -> School | None:
        result = await self._db.execute(
            select(School)
            .where(School.id == school_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _get_user_by_id(self, user_id: str) -> User | None:
        result = await self._db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()
