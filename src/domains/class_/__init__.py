# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class domain package.

This package provides class scheduling functionality including:
- Weekly occurrence generation
- Series identity and cascade scope resolution
- The class store facade
- Class creation, update and deletion
"""

from src.domains.class_.exceptions import (
    BatchLimitExceededError,
    ClassNotFoundError,
    ClassServiceError,
)
from src.domains.class_.recurrence import WEEKLY, generate_occurrences, series_horizon
from src.domains.class_.repository import ClassRepository
from src.domains.class_.series import (
    CascadeCutoff,
    assign_series_ids,
    belongs_to_series,
    new_series_id,
    resolve_cascade_scope,
)
from src.domains.class_.service import ClassService

__all__ = [
    "ClassService",
    "ClassRepository",
    "ClassServiceError",
    "ClassNotFoundError",
    "BatchLimitExceededError",
    "WEEKLY",
    "generate_occurrences",
    "series_horizon",
    "CascadeCutoff",
    "assign_series_ids",
    "belongs_to_series",
    "new_series_id",
    "resolve_cascade_scope",
]
