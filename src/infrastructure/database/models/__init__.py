# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for the class store.

Importing this package registers every table on ``Base.metadata``.
"""

from src.infrastructure.database.models.base import Base, TimestampMixin, new_id
from src.infrastructure.database.models.school import (
    Class,
    ClassEnrollment,
    School,
    SchoolTeacher,
)
from src.infrastructure.database.models.user import User

__all__ = [
    "Base",
    "TimestampMixin",
    "new_id",
    "School",
    "SchoolTeacher",
    "Class",
    "ClassEnrollment",
    "User",
]
