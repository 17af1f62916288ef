# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School domain package.

This package provides school management functionality including:
- School creation by a teacher
- School listing and lookup
- Teacher membership
"""

from src.domains.school.service import (
    SchoolNotFoundError,
    SchoolPermissionError,
    SchoolService,
    SchoolServiceError,
)

__all__ = [
    "SchoolService",
    "SchoolServiceError",
    "SchoolNotFoundError",
    "SchoolPermissionError",
]
