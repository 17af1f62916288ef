# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User service for profile management.

This module provides the UserService that handles:
- Profile lookups
- Profile editing, with re-authentication for email/password changes
- Attaching a user to a school
"""

import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.auth.service import (
    IdentityService,
    NotAuthenticatedError,
    ReauthenticationRequiredError,
    normalize_email,
)
from src.infrastructure.database.models import User
from src.models.user import ProfileUpdateRequest, UserResponse

logger = logging.getLogger(__name__)


class UserServiceError(Exception):
    """Base exception for user service errors."""

    pass


class UserNotFoundError(UserServiceError):
    """Raised when a user is not found."""

    pass


class UserService:
    """Service for reading and editing user profiles.

    Attributes:
        _db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize the user service.

        Args:
            db: Async database session.
        """
        self._db = db

    async def get_user(self, user_id: str) -> UserResponse:
        """Get a user profile.

        Raises:
            UserNotFoundError: If user not found.
        """
        user = await self._get_by_id(user_id)
        return UserResponse.model_validate(user)

    async def list_users(self, user_ids: Iterable[str]) -> list[UserResponse]:
        """Profiles of the given users, sorted by name. Unknown IDs are skipped."""
        ids = list(set(user_ids))
        if not ids:
            return []

        result = await self._db.execute(
            select(User).where(User.id.in_(ids)).order_by(User.name, User.id)
        )
        return [UserResponse.model_validate(u) for u in result.scalars().all()]

    async def set_school(self, user_id: str, school_id: str) -> UserResponse:
        """Attach a user to a school.

        Raises:
            UserNotFoundError: If user not found.
        """
        user = await self._get_by_id(user_id)
        user.school_id = school_id
        await self._db.flush()
        response = UserResponse.model_validate(user)
        await self._db.commit()

        logger.info("User %s joined school %s", user_id, school_id)
        return response

    async def update_profile(
        self,
        user_id: str,
        request: ProfileUpdateRequest,
        identity: IdentityService,
    ) -> UserResponse:
        """Edit the current user's profile.

        The name is always written. Changing the email or the password first
        re-verifies ``current_password`` with the identity provider, then
        applies the credential change there.

        Args:
            user_id: Profile to edit; must be the signed-in user.
            request: New profile values.
            identity: Identity collaborator holding the current session.

        Returns:
            Updated profile.

        Raises:
            NotAuthenticatedError: If ``user_id`` is not the signed-in user.
            ReauthenticationRequiredError: If a credential change lacks
                ``current_password``.
            InvalidCredentialsError: If ``current_password`` is wrong.
            WeakPasswordError: If ``new_password`` is too short; nothing is
                changed then.
            UserNotFoundError: If user not found.
        """
        if identity.current_user_id != user_id:
            raise NotAuthenticatedError("Profile can only be edited by its signed-in owner")

        user = await self._get_by_id(user_id)
        new_email = normalize_email(request.email)
        email_changed = new_email != user.email

        if email_changed or request.new_password:
            if not request.current_password:
                raise ReauthenticationRequiredError(
                    "Current password is required to change email or password"
                )
            if request.new_password:
                identity.check_password_strength(request.new_password)
            await identity.reauthenticate(request.current_password)

            if email_changed:
                await identity.update_email(new_email)
                user.email = new_email
            if request.new_password:
                await identity.update_password(request.new_password)

        user.name = request.name
        await self._db.flush()
        response = UserResponse.model_validate(user)
        await self._db.commit()

        logger.info(
            "Profile updated: %s (email_changed=%s, password_changed=%s)",
            user_id,
            email_changed,
            bool(request.new_password),
        )
        return response

    async def _get_by_id(self, user_id: str) -> User:
        result = await self._db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            raise UserNotFoundError(f"User {user_id} not found")
        return user
