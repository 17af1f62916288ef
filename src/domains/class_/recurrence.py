# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Occurrence generation for recurring classes.

A recurring class repeats at the same weekday and time of day as its
first occurrence, up to (excluding) a horizon one calendar year later.
Instants are UTC; no local-time or DST adjustment is made.
"""

from datetime import datetime, timedelta

from src.utils.datetime import add_years, ensure_utc

WEEKLY = timedelta(weeks=1)


def series_horizon(start: datetime, years: int = 1) -> datetime:
    """Exclusive end of a series starting at ``start``."""
    return add_years(ensure_utc(start), years)


def generate_occurrences(
    start: datetime,
    horizon_end: datetime | None = None,
    interval: timedelta = WEEKLY,
) -> list[datetime]:
    """Generate the instants of a recurring series.

    Args:
        start: First occurrence. Always part of the result.
        horizon_end: Exclusive upper bound. Defaults to one year after start.
        interval: Step between occurrences.

    Returns:
        Strictly increasing list starting at ``start`` whose other items are
        all strictly before ``horizon_end``.

    Raises:
        ValueError: If interval is not positive.
    """
    if interval <= timedelta(0):
        raise ValueError("Recurrence interval must be positive")

    start = ensure_utc(start)
    end = ensure_utc(horizon_end) if horizon_end is not None else series_horizon(start)

    occurrences = [start]
    current = start + interval
    while current < end:
        occurrences.append(current)
        current += interval
    return occurrences
