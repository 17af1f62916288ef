# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User request and response models."""

from enum import Enum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"


class UserRole(str, Enum):
    """Global role of an account."""

    STUDENT = "student"
    TEACHER = "teacher"


class UserResponse(BaseModel):
    """User profile as published to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    role: UserRole
    school_id: str | None = None

    @property
    def is_teacher(self) -> bool:
        return self.role == UserRole.TEACHER


class ProfileUpdateRequest(BaseModel):
    """Profile edit submitted by the current user.

    Changing the email or the password requires ``current_password``;
    that rule needs the stored profile and is enforced by UserService.
    """

    name: str = Field(min_length=1, max_length=200)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    current_password: str | None = None
    new_password: str | None = None
    confirm_password: str | None = None

    @model_validator(mode="after")
    def passwords_match(self) -> Self:
        if self.new_password and self.new_password != self.confirm_password:
            raise ValueError("New password and confirmation do not match")
        return self
