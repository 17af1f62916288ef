# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School request and response models."""

from pydantic import BaseModel, ConfigDict, Field


class SchoolCreateRequest(BaseModel):
    """Request model for creating a school."""

    name: str = Field(min_length=1, max_length=200)
    address: str = Field(min_length=1, max_length=500)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+$", max_length=255)
    logo: str | None = Field(default=None, max_length=1000)
    instagram: str | None = Field(default=None, max_length=255)


class SchoolResponse(BaseModel):
    """School as published to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    address: str
    email: str
    logo: str | None = None
    instagram: str | None = None
    teacher_ids: set[str] = Field(default_factory=set)
