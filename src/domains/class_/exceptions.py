# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions raised by class scheduling operations."""


class ClassServiceError(Exception):
    """Base exception for class service errors."""

    pass


class ClassNotFoundError(ClassServiceError):
    """Raised when a class occurrence does not exist."""

    def __init__(self, class_id: str) -> None:
        self.class_id = class_id
        super().__init__(f"Class '{class_id}' not found")


class BatchLimitExceededError(ClassServiceError):
    """Raised when a multi-document write exceeds the per-batch bound.

    Raised before anything is written, so the batch is never partially
    applied.
    """

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Batch of {size} documents exceeds the limit of {limit}")
