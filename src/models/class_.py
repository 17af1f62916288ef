# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class occurrence request and response models."""

from datetime import datetime
from enum import Enum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.utils.datetime import ensure_utc

NON_NULLABLE_UPDATE_FIELDS = (
    "title",
    "level",
    "scheduled_at",
    "duration",
    "max_students",
    "teacher_id",
    "is_recurring",
)


class ClassLevel(str, Enum):
    """Difficulty level of a class."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ClassCreateRequest(BaseModel):
    """Draft of a class, single or the template of a weekly series.

    Every field is copied onto each generated occurrence except
    ``scheduled_at`` (one per week) and the series marker.
    """

    school_id: str
    teacher_id: str
    title: str = Field(min_length=1, max_length=200)
    level: ClassLevel
    description: str | None = None
    scheduled_at: datetime
    duration: int = Field(gt=0, description="Duration in minutes")
    max_students: int = Field(gt=0)
    enrolled_students: set[str] = Field(default_factory=set)
    is_recurring: bool = False

    @field_validator("scheduled_at")
    @classmethod
    def normalize_scheduled_at(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class ClassUpdateRequest(BaseModel):
    """Partial update of a class occurrence.

    Only the fields explicitly set are written, so ``description=None``
    clears the description while omitting it leaves it untouched.
    """

    teacher_id: str | None = None
    title: str | None = Field(default=None, min_length=1, max_length=200)
    level: ClassLevel | None = None
    description: str | None = None
    scheduled_at: datetime | None = None
    duration: int | None = Field(default=None, gt=0)
    max_students: int | None = Field(default=None, gt=0)
    is_recurring: bool | None = None

    @field_validator("scheduled_at")
    @classmethod
    def normalize_scheduled_at(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value)

    @model_validator(mode="after")
    def require_one_field(self) -> Self:
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        for name in NON_NULLABLE_UPDATE_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"'{name}' cannot be null")
        return self

    def to_patch(self) -> dict[str, Any]:
        """Column values to write, restricted to the fields that were set."""
        patch = self.model_dump(exclude_unset=True)
        if "level" in patch:
            patch["level"] = ClassLevel(patch["level"]).value
        return patch


class ClassOccurrence(BaseModel):
    """One scheduled occurrence as read from the store."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    series_id: str | None = None
    school_id: str
    teacher_id: str
    title: str
    level: ClassLevel
    description: str | None = None
    scheduled_at: datetime
    duration: int
    max_students: int
    enrolled_students: set[str] = Field(default_factory=set)
    is_recurring: bool = False

    @field_validator("scheduled_at")
    @classmethod
    def normalize_scheduled_at(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def is_full(self) -> bool:
        return len(self.enrolled_students) >= self.max_students

    @property
    def is_in_series(self) -> bool:
        """Whether cascade operations can reach this occurrence."""
        return self.series_id is not None

    def is_enrolled(self, user_id: str) -> bool:
        return user_id in self.enrolled_students
