# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic models exchanged with callers of the domain services."""

from src.models.class_ import (
    ClassCreateRequest,
    ClassLevel,
    ClassOccurrence,
    ClassUpdateRequest,
)
from src.models.school import SchoolCreateRequest, SchoolResponse
from src.models.user import ProfileUpdateRequest, UserResponse, UserRole

__all__ = [
    "ClassCreateRequest",
    "ClassLevel",
    "ClassOccurrence",
    "ClassUpdateRequest",
    "SchoolCreateRequest",
    "SchoolResponse",
    "ProfileUpdateRequest",
    "UserResponse",
    "UserRole",
]
