# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for User service."""

from unittest.mock import AsyncMock, MagicMock, PropertyMock

import pytest
from pydantic import ValidationError

from src.domains.auth.service import (
    IdentityService,
    InvalidCredentialsError,
    NotAuthenticatedError,
    ReauthenticationRequiredError,
    WeakPasswordError,
)
from src.domains.user.service import UserNotFoundError, UserService
from src.infrastructure.database.models import User
from src.models.user import ProfileUpdateRequest


@pytest.fixture
def mock_db():
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.execute = AsyncMock()
    return db


@pytest.fixture
def user_service(mock_db):
    """Create user service with mock database."""
    return UserService(db=mock_db)


@pytest.fixture
def sample_user():
    return User(id="user-1", email="ana@school.com", name="Ana", role="student", school_id=None)


@pytest.fixture
def identity():
    """Identity collaborator signed in as user-1."""
    identity = MagicMock(spec=IdentityService)
    type(identity).current_user_id = PropertyMock(return_value="user-1")
    identity.reauthenticate = AsyncMock()
    identity.update_email = AsyncMock()
    identity.update_password = AsyncMock()
    return identity


def create_mock_result(value):
    """Create a mock result with scalar_one_or_none."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def create_mock_list_result(values):
    result = MagicMock()
    result.scalars.return_value.all.return_value = values
    return result


class TestUserServiceRead:
    """Tests for profile lookups."""

    @pytest.mark.asyncio
    async def test_get_user(self, user_service, mock_db, sample_user):
        mock_db.execute.return_value = create_mock_result(sample_user)

        user = await user_service.get_user("user-1")

        assert user.id == "user-1"
        assert user.name == "Ana"

    @pytest.mark.asyncio
    async def test_get_user_not_found(self, user_service, mock_db):
        mock_db.execute.return_value = create_mock_result(None)

        with pytest.raises(UserNotFoundError):
            await user_service.get_user("missing")

    @pytest.mark.asyncio
    async def test_list_users(self, user_service, mock_db, sample_user):
        mock_db.execute.return_value = create_mock_list_result([sample_user])

        users = await user_service.list_users({"user-1"})

        assert [u.id for u in users] == ["user-1"]

    @pytest.mark.asyncio
    async def test_list_users_empty_skips_query(self, user_service, mock_db):
        assert await user_service.list_users(set()) == []
        mock_db.execute.assert_not_called()


class TestUserServiceSetSchool:
    """Tests for attaching a user to a school."""

    @pytest.mark.asyncio
    async def test_set_school(self, user_service, mock_db, sample_user):
        mock_db.execute.return_value = create_mock_result(sample_user)

        user = await user_service.set_school("user-1", "school-1")

        assert user.school_id == "school-1"
        assert sample_user.school_id == "school-1"
        mock_db.commit.assert_awaited_once()


class TestUserServiceUpdateProfile:
    """Tests for profile editing."""

    @pytest.mark.asyncio
    async def test_name_only(self, user_service, mock_db, sample_user, identity):
        mock_db.execute.return_value = create_mock_result(sample_user)
        request = ProfileUpdateRequest(name="Ana Maria", email="ana@school.com")

        user = await user_service.update_profile("user-1", request, identity)

        assert user.name == "Ana Maria"
        identity.reauthenticate.assert_not_called()
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_email_change_reauthenticates_first(self, user_service, mock_db, sample_user, identity):
        mock_db.execute.return_value = create_mock_result(sample_user)
        request = ProfileUpdateRequest(
            name="Ana", email="Ana.New@School.com", current_password="secret123"
        )

        user = await user_service.update_profile("user-1", request, identity)

        identity.reauthenticate.assert_awaited_once_with("secret123")
        identity.update_email.assert_awaited_once_with("ana.new@school.com")
        identity.update_password.assert_not_called()
        assert user.email == "ana.new@school.com"

    @pytest.mark.asyncio
    async def test_password_change(self, user_service, mock_db, sample_user, identity):
        mock_db.execute.return_value = create_mock_result(sample_user)
        request = ProfileUpdateRequest(
            name="Ana",
            email="ana@school.com",
            current_password="secret123",
            new_password="brand-new",
            confirm_password="brand-new",
        )

        await user_service.update_profile("user-1", request, identity)

        identity.update_password.assert_awaited_once_with("brand-new")
        identity.update_email.assert_not_called()

    @pytest.mark.asyncio
    async def test_credential_change_without_current_password(
        self, user_service, mock_db, sample_user, identity
    ):
        mock_db.execute.return_value = create_mock_result(sample_user)
        request = ProfileUpdateRequest(name="Ana", email="other@school.com")

        with pytest.raises(ReauthenticationRequiredError):
            await user_service.update_profile("user-1", request, identity)

        identity.update_email.assert_not_called()
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_wrong_current_password_changes_nothing(
        self, user_service, mock_db, sample_user, identity
    ):
        mock_db.execute.return_value = create_mock_result(sample_user)
        identity.reauthenticate.side_effect = InvalidCredentialsError("Current password is incorrect")
        request = ProfileUpdateRequest(
            name="Renamed", email="other@school.com", current_password="nope"
        )

        with pytest.raises(InvalidCredentialsError):
            await user_service.update_profile("user-1", request, identity)

        identity.update_email.assert_not_called()
        assert sample_user.name == "Ana"

    @pytest.mark.asyncio
    async def test_weak_new_password_changes_nothing(
        self, user_service, mock_db, sample_user, identity
    ):
        mock_db.execute.return_value = create_mock_result(sample_user)
        identity.check_password_strength.side_effect = WeakPasswordError(
            "Password must be at least 6 characters"
        )
        request = ProfileUpdateRequest(
            name="Ana",
            email="ana.new@school.com",
            current_password="secret123",
            new_password="abc",
            confirm_password="abc",
        )

        with pytest.raises(WeakPasswordError):
            await user_service.update_profile("user-1", request, identity)

        identity.check_password_strength.assert_called_once_with("abc")
        identity.reauthenticate.assert_not_called()
        identity.update_email.assert_not_called()
        identity.update_password.assert_not_called()
        assert sample_user.email == "ana@school.com"
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_other_users_profile_rejected(self, user_service, mock_db, identity):
        request = ProfileUpdateRequest(name="Bo", email="bo@school.com")

        with pytest.raises(NotAuthenticatedError):
            await user_service.update_profile("user-2", request, identity)

        mock_db.execute.assert_not_called()

    def test_password_confirmation_mismatch(self):
        with pytest.raises(ValidationError, match="do not match"):
            ProfileUpdateRequest(
                name="Ana",
                email="ana@school.com",
                current_password="secret123",
                new_password="one",
                confirm_password="two",
            )
