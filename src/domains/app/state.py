# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application state for a ClassBook client.

AppState is the object a presentation layer holds. It publishes the current
user, the current school and the upcoming classes of that school, and it
re-runs the upcoming-classes query after every mutating operation.

Example:
    >>> state = AppState(get_sessionmaker(), IdentityService(get_sessionmaker()))
    >>> await state.sign_in("ana@school.com", "secret123")
    >>> await state.add_class(request)
    >>> state.classes[0].title
    'Yoga Basics'
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.config.settings import Settings, get_settings
from src.domains.auth.service import IdentityService, NotAuthenticatedError
from src.domains.class_.repository import ClassRepository
from src.domains.class_.service import ClassService
from src.domains.enrollment.service import EnrollmentService
from src.domains.school.service import SchoolService
from src.domains.user.service import UserService
from src.infrastructure.database.connection import session_scope
from src.models.class_ import ClassCreateRequest, ClassOccurrence, ClassUpdateRequest
from src.models.school import SchoolCreateRequest, SchoolResponse
from src.models.user import ProfileUpdateRequest, UserResponse, UserRole
from src.utils.datetime import utc_now
from src.utils.logging import bind_context, clear_context

logger = logging.getLogger(__name__)


class AppState:
    """Published client state plus the operations that change it.

    Attributes:
        user: Signed-in user profile, if any.
        school: School of the signed-in user, if any.
        classes: Upcoming occurrences of ``school``, soonest first.
        is_loading: True while an operation is in flight.
        identity: Identity collaborator.
        class_service: Series manager.
        enrollment_service: Enrollment manager.
    """

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        identity: IdentityService,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        settings = settings or get_settings()
        self._sessionmaker = sessionmaker
        self.identity = identity

        repository = ClassRepository(
            sessionmaker, max_batch_size=settings.scheduling.max_batch_size
        )
        self.class_service = ClassService(repository, settings.scheduling, clock)
        self.enrollment_service = EnrollmentService(repository)

        self.user: UserResponse | None = None
        self.school: SchoolResponse | None = None
        self.classes: list[ClassOccurrence] = []
        self.is_loading = False

    # =========================================================================
    # Session
    # =========================================================================

    async def sign_up(
        self,
        email: str,
        password: str,
        name: str,
        role: UserRole,
    ) -> UserResponse:
        """Register an account, sign it in and publish it."""
        self.is_loading = True
        try:
            self.user = await self.identity.sign_up(email, password, name, role)
            bind_context(user_id=self.user.id)
            self.school = None
            self.classes = []
            return self.user
        finally:
            self.is_loading = False

    async def sign_in(self, email: str, password: str) -> UserResponse:
        """Sign in and publish the user, their school and its classes."""
        self.is_loading = True
        try:
            await self.identity.sign_in(email, password)
        finally:
            self.is_loading = False
        return await self.load_current_user()

    def sign_out(self) -> None:
        """Sign out and clear every published value."""
        self.identity.sign_out()
        self.user = None
        self.school = None
        self.classes = []
        clear_context()

    async def load_current_user(self) -> UserResponse:
        """Reload the signed-in user's profile, school and classes.

        Raises:
            NotAuthenticatedError: If nobody is signed in.
        """
        user_id = self.identity.require_current_user_id()
        self.is_loading = True
        try:
            async with session_scope(self._sessionmaker) as db:
                self.user = await UserService(db).get_user(user_id)
            bind_context(user_id=user_id)
            await self.fetch_current_school()
        finally:
            self.is_loading = False
        await self.refresh()
        return self.user

    async def update_profile(self, request: ProfileUpdateRequest) -> UserResponse:
        """Edit the signed-in user's profile.

        Raises:
            NotAuthenticatedError: If nobody is signed in.
            ReauthenticationRequiredError: If a credential change lacks the
                current password.
        """
        user_id = self._require_user().id
        async with session_scope(self._sessionmaker) as db:
            self.user = await UserService(db).update_profile(user_id, request, self.identity)
        return self.user

    # =========================================================================
    # Schools
    # =========================================================================

    async def create_school(self, request: SchoolCreateRequest) -> SchoolResponse:
        """Create a school owned by the signed-in teacher and switch to it."""
        user = self._require_user()
        async with session_scope(self._sessionmaker) as db:
            self.school = await SchoolService(db).create_school(request, user.id)
        self.user = user.model_copy(update={"school_id": self.school.id})
        await self.refresh()
        return self.school

    async def join_school(self, school_id: str) -> SchoolResponse:
        """Attach the signed-in user to a school.

        Teachers are also added to the school's ``teacher_ids``.

        Raises:
            NotAuthenticatedError: If nobody is signed in.
            SchoolNotFoundError: If school not found.
        """
        user = self._require_user()
        async with session_scope(self._sessionmaker) as db:
            schools = SchoolService(db)
            school = await schools.get_school(school_id)
            if user.is_teacher:
                school = await schools.add_teacher(school_id, user.id)
            self.user = await UserService(db).set_school(user.id, school_id)
        self.school = school
        await self.refresh()
        return school

    async def fetch_schools(self) -> list[SchoolResponse]:
        """Every school, sorted by name."""
        async with session_scope(self._sessionmaker) as db:
            return await SchoolService(db).list_schools()

    async def fetch_current_school(self) -> SchoolResponse | None:
        """Reload the signed-in user's school; None if they have none."""
        user = self._require_user()
        if not user.school_id:
            self.school = None
            return None
        async with session_scope(self._sessionmaker) as db:
            self.school = await SchoolService(db).get_school(user.school_id)
        return self.school

    # =========================================================================
    # Classes
    # =========================================================================

    async def add_class(self, request: ClassCreateRequest) -> list[ClassOccurrence]:
        """Create a class or a weekly series, then refresh."""
        self._require_user()
        created = await self.class_service.create_class(request)
        await self.refresh()
        return created

    async def update_class(
        self,
        class_id: str,
        request: ClassUpdateRequest,
        apply_to_series: bool = False,
    ) -> list[str]:
        """Patch one occurrence or this-and-future occurrences, then refresh."""
        self._require_user()
        updated = await self.class_service.update_class(class_id, request, apply_to_series)
        await self.refresh()
        return updated

    async def delete_class(self, class_id: str, apply_to_series: bool = False) -> list[str]:
        """Delete one occurrence or this-and-future occurrences, then refresh."""
        self._require_user()
        deleted = await self.class_service.delete_class(class_id, apply_to_series)
        await self.refresh()
        return deleted

    async def enroll_in_class(
        self,
        class_id: str,
        apply_to_series: bool = False,
        user_id: str | None = None,
    ) -> list[str]:
        """Enroll a student, the signed-in user by default.

        The occurrence being enrolled in is checked for a free spot first,
        unless the student is already a member. Other occurrences reached by
        a series-wide enrollment are not checked.

        Raises:
            NotAuthenticatedError: If nobody is signed in.
            ClassNotFoundError: If class not found.
            ClassFullError: If the targeted occurrence is full.
        """
        current = self._require_user()
        student_id = user_id or current.id
        target = await self.class_service.get_class(class_id)
        if not target.is_enrolled(student_id):
            self.enrollment_service.ensure_capacity(target)

        enrolled = await self.enrollment_service.enroll(class_id, student_id, apply_to_series)
        await self.refresh()
        return enrolled

    async def unenroll_from_class(
        self,
        class_id: str,
        apply_to_series: bool = False,
        user_id: str | None = None,
    ) -> list[str]:
        """Withdraw a student, the signed-in user by default."""
        current = self._require_user()
        student_id = user_id or current.id
        withdrawn = await self.enrollment_service.unenroll(class_id, student_id, apply_to_series)
        await self.refresh()
        return withdrawn

    async def list_enrolled_students(self, class_id: str) -> list[UserResponse]:
        """Profiles of the students enrolled in an occurrence, sorted by name.

        Raises:
            ClassNotFoundError: If class not found.
        """
        occurrence = await self.class_service.get_class(class_id)
        async with session_scope(self._sessionmaker) as db:
            return await UserService(db).list_users(occurrence.enrolled_students)

    async def refresh(self) -> list[ClassOccurrence]:
        """Re-run the upcoming-classes query for the current school."""
        school_id = self.user.school_id if self.user else None
        if not school_id:
            self.classes = []
            return self.classes

        self.is_loading = True
        try:
            self.classes = await self.class_service.list_upcoming_classes(school_id)
        except Exception:
            logger.exception("Failed to refresh classes for school %s", school_id)
            raise
        finally:
            self.is_loading = False
        return self.classes

    def _require_user(self) -> UserResponse:
        if self.user is None or not self.identity.is_authenticated:
            raise NotAuthenticatedError("No user is signed in")
        return self.user
