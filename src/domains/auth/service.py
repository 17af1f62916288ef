# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Local identity provider.

This module provides the IdentityService that answers "who is signed in"
for the domain services and handles:
- Sign up, sign in and sign out with email and password
- Credential re-verification before sensitive changes
- Email and password changes

Credentials live on the ``users`` row (bcrypt hash), so the profile and
the login share one email.

Example:
    >>> identity = IdentityService(get_sessionmaker())
    >>> user = await identity.sign_in("ana@school.com", "secret123")
    >>> identity.require_current_user_id()
    'a1b2...'
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.domains.auth.password import PasswordHasher
from src.infrastructure.database.connection import session_scope
from src.infrastructure.database.models import User
from src.models.user import UserResponse, UserRole

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Base exception for authentication errors."""

    pass


class NotAuthenticatedError(AuthenticationError):
    """Raised when an operation needs a signed-in user and there is none."""

    pass


class InvalidCredentialsError(AuthenticationError):
    """Raised when an email/password pair does not match."""

    pass


class EmailAlreadyRegisteredError(AuthenticationError):
    """Raised when an email is already used by another account."""

    pass


class WeakPasswordError(AuthenticationError):
    """Raised when a password is shorter than the configured minimum."""

    pass


class ReauthenticationRequiredError(AuthenticationError):
    """Raised when a sensitive change is requested without the current password."""

    pass


def normalize_email(email: str) -> str:
    return email.strip().lower()


class IdentityService:
    """Email/password identity backed by the users table.

    Holds the current session for the process that owns it; one instance
    serves one signed-in user at a time.

    Attributes:
        _sessionmaker: Factory for per-call sessions.
        _hasher: Password hasher.
        _min_password_length: Shortest accepted password.
        _current_user_id: Signed-in user, if any.
        _current_email: Email of the signed-in user, if any.
    """

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        hasher: PasswordHasher | None = None,
        min_password_length: int = 6,
    ) -> None:
        self._sessionmaker = sessionmaker
        self._hasher = hasher or PasswordHasher()
        self._min_password_length = min_password_length
        self._current_user_id: str | None = None
        self._current_email: str | None = None

    @property
    def current_user_id(self) -> str | None:
        return self._current_user_id

    @property
    def current_email(self) -> str | None:
        return self._current_email

    @property
    def is_authenticated(self) -> bool:
        return self._current_user_id is not None

    def require_current_user_id(self) -> str:
        """Return the signed-in user ID.

        Raises:
            NotAuthenticatedError: If nobody is signed in.
        """
        if self._current_user_id is None:
            raise NotAuthenticatedError("No user is signed in")
        return self._current_user_id

    async def sign_up(
        self,
        email: str,
        password: str,
        name: str,
        role: UserRole,
    ) -> UserResponse:
        """Register an account and sign it in.

        Raises:
            WeakPasswordError: If the password is too short.
            EmailAlreadyRegisteredError: If the email is taken.
        """
        self.check_password_strength(password)
        email = normalize_email(email)

        async with session_scope(self._sessionmaker) as db:
            if await self._get_by_email(db, email) is not None:
                raise EmailAlreadyRegisteredError(f"Email '{email}' is already registered")

            user = User(
                email=email,
                name=name,
                role=UserRole(role).value,
                password_hash=self._hasher.hash(password),
            )
            db.add(user)
            await db.flush()
            response = UserResponse.model_validate(user)

        self._set_current(response.id, response.email)
        logger.info("User signed up: %s (role=%s)", response.id, response.role.value)
        return response

    async def sign_in(self, email: str, password: str) -> UserResponse:
        """Verify credentials and make the account current.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password wrong.
        """
        email = normalize_email(email)
        async with session_scope(self._sessionmaker) as db:
            user = await self._get_by_email(db, email)
            if user is None or not self._hasher.verify(password, user.password_hash):
                logger.warning("Failed sign in for %s", email)
                raise InvalidCredentialsError("Invalid email or password")
            response = UserResponse.model_validate(user)

        self._set_current(response.id, response.email)
        logger.info("User signed in: %s", response.id)
        return response

    def sign_out(self) -> None:
        """Forget the current session."""
        if self._current_user_id is not None:
            logger.info("User signed out: %s", self._current_user_id)
        self._set_current(None, None)

    async def reauthenticate(self, password: str) -> None:
        """Re-verify the current user's password.

        Raises:
            NotAuthenticatedError: If nobody is signed in.
            InvalidCredentialsError: If the password is wrong.
        """
        user_id = self.require_current_user_id()
        async with session_scope(self._sessionmaker) as db:
            user = await db.get(User, user_id)
            if user is None or not self._hasher.verify(password, user.password_hash):
                logger.warning("Failed re-authentication for user %s", user_id)
                raise InvalidCredentialsError("Current password is incorrect")

    async def update_email(self, new_email: str) -> None:
        """Change the login email of the current user.

        Raises:
            NotAuthenticatedError: If nobody is signed in.
            EmailAlreadyRegisteredError: If another account uses the email.
        """
        user_id = self.require_current_user_id()
        new_email = normalize_email(new_email)

        async with session_scope(self._sessionmaker) as db:
            existing = await self._get_by_email(db, new_email)
            if existing is not None and existing.id != user_id:
                raise EmailAlreadyRegisteredError(f"Email '{new_email}' is already registered")
            user = await self._get_current(db, user_id)
            user.email = new_email

        self._current_email = new_email
        logger.info("Email changed for user %s", user_id)

    async def update_password(self, new_password: str) -> None:
        """Change the password of the current user.

        Raises:
            NotAuthenticatedError: If nobody is signed in.
            WeakPasswordError: If the password is too short.
        """
        user_id = self.require_current_user_id()
        self.check_password_strength(new_password)

        async with session_scope(self._sessionmaker) as db:
            user = await self._get_current(db, user_id)
            user.password_hash = self._hasher.hash(new_password)

        logger.info("Password changed for user %s", user_id)

    def check_password_strength(self, password: str) -> None:
        """Raise WeakPasswordError if the password is too short."""
        if len(password or "") < self._min_password_length:
            raise WeakPasswordError(
                f"Password must be at least {self._min_password_length} characters"
            )

    def _set_current(self, user_id: str | None, email: str | None) -> None:
        self._current_user_id = user_id
        self._current_email = email

    async def _get_current(self, db: AsyncSession, user_id: str) -> User:
        user = await db.get(User, user_id)
        if user is None:
            # Account removed behind our back: the session is no longer valid
            self._set_current(None, None)
            raise NotAuthenticatedError("Signed-in account no longer exists")
        return user

    @staticmethod
    async def _get_by_email(db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(func.lower(User.email) == email))
        return result.scalar_one_or_none()
