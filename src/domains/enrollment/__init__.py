# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides class membership management functionality including:
- Enrollment in one occurrence or this-and-future occurrences
- Withdrawal
- Capacity pre-check
"""

from src.domains.enrollment.service import (
    ClassFullError,
    EnrollmentService,
    EnrollmentServiceError,
)

__all__ = [
    "EnrollmentService",
    "EnrollmentServiceError",
    "ClassFullError",
]
