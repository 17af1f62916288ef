# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School and class models.

A Class row is one occurrence of a session. Occurrences generated from the
same recurring definition share ``series_id``, except the first one whose
``series_id`` stays NULL. Membership lives in ``class_enrollments`` whose
composite primary key makes a user's enrollment in an occurrence unique.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, new_id
from src.utils.datetime import utc_now


class School(Base, TimestampMixin):
    """A school owning classes, teachers and students."""

    __tablename__ = "schools"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    logo: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    instagram: Mapped[str | None] = mapped_column(String(255), nullable=True)

    teachers: Mapped[list["SchoolTeacher"]] = relationship(
        back_populates="school",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def teacher_ids(self) -> list[str]:
        return [t.user_id for t in self.teachers]

    def __repr__(self) -> str:
        return f"<School(id={self.id}, name='{self.name}')>"


class SchoolTeacher(Base):
    """Set membership of a teacher in a school."""

    __tablename__ = "school_teachers"

    school_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("schools.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    school: Mapped["School"] = relationship(back_populates="teachers")


class Class(Base, TimestampMixin):
    """One scheduled occurrence of a class."""

    __tablename__ = "classes"
    __table_args__ = (
        Index("ix_classes_series_scheduled", "series_id", "scheduled_at"),
        Index("ix_classes_school_scheduled", "school_id", "scheduled_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    series_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    school_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("schools.id"),
        nullable=False,
    )
    teacher_id: Mapped[str] = mapped_column(String(36), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    max_students: Mapped[int] = mapped_column(Integer, nullable=False)
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    enrollments: Mapped[list["ClassEnrollment"]] = relationship(
        back_populates="class_",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    @property
    def enrolled_students(self) -> set[str]:
        return {e.user_id for e in self.enrollments}

    def __repr__(self) -> str:
        return (
            f"<Class(id={self.id}, title='{self.title}', "
            f"scheduled_at={self.scheduled_at}, series_id={self.series_id})>"
        )


class ClassEnrollment(Base):
    """Set membership of a student in one class occurrence."""

    __tablename__ = "class_enrollments"

    class_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("classes.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(String(36), primary_key=True, index=True)
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    class_: Mapped["Class"] = relationship(back_populates="enrollments")
