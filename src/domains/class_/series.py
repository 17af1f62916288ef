# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Series identity and cascade scope resolution.

Occurrences of one recurring series are linked by ``series_id``. The first
occurrence never carries it: it stays standalone for every cascade, and
only occurrences 2..N can be reached by "this and all future" operations.

Two cutoff policies decide which occurrences count as "future":

- ``CascadeCutoff.FROM_NOW``: at or after the current wall-clock time.
  Used by update and delete.
- ``CascadeCutoff.FROM_OCCURRENCE``: at or after the targeted occurrence.
  Used by enroll and unenroll.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Sequence
from uuid import uuid4

from src.models.class_ import ClassOccurrence

if TYPE_CHECKING:
    from src.domains.class_.repository import ClassRepository

logger = logging.getLogger(__name__)


def new_series_id() -> str:
    """Generate a series marker, distinct from any occurrence id."""
    return str(uuid4())


def assign_series_ids(
    occurrences: Sequence[ClassOccurrence],
    series_id: str | None = None,
) -> list[ClassOccurrence]:
    """Link freshly generated occurrences into one series.

    Args:
        occurrences: Occurrences in chronological order.
        series_id: Marker to use; a new one is generated if omitted.

    Returns:
        Copies of the occurrences: the first with ``series_id=None``,
        all others with the shared marker.
    """
    marker = series_id or new_series_id()
    return [
        occurrence.model_copy(update={"series_id": None if index == 0 else marker})
        for index, occurrence in enumerate(occurrences)
    ]


def belongs_to_series(occurrence: ClassOccurrence, series_id: str | None) -> bool:
    """Whether a cascade addressed by ``series_id`` reaches ``occurrence``."""
    if series_id is None:
        return False
    return occurrence.series_id == series_id


class CascadeCutoff(str, Enum):
    """Earliest occurrence a series-wide operation may touch."""

    FROM_NOW = "from_now"
    FROM_OCCURRENCE = "from_occurrence"

    def resolve(self, target: ClassOccurrence, now: datetime) -> datetime:
        if self is CascadeCutoff.FROM_NOW:
            return now
        return target.scheduled_at


async def resolve_cascade_scope(
    repository: ClassRepository,
    target: ClassOccurrence,
    apply_to_series: bool,
    cutoff: CascadeCutoff,
    now: datetime,
) -> list[str]:
    """Ids of the occurrences an operation on ``target`` applies to.

    Only the target when the caller asked for a single occurrence or the
    target carries no series marker. Otherwise every same-series occurrence
    at or after the cutoff; with ``FROM_NOW`` this may exclude the target
    itself when it lies in the past.
    """
    if not apply_to_series or not target.is_in_series:
        return [target.id]

    since = cutoff.resolve(target, now)
    siblings = await repository.list_by_series(target.series_id, starts_from=since)
    scope = [o.id for o in siblings if belongs_to_series(o, target.series_id)]

    if not scope:
        logger.warning(
            "Series cascade matched no occurrences: series=%s, cutoff=%s, since=%s",
            target.series_id,
            cutoff.value,
            since.isoformat(),
        )
    return scope
