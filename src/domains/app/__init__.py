# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application state package.

Holds the published client state (user, school, upcoming classes) and the
operations a presentation layer calls.
"""

from src.domains.app.state import AppState

__all__ = ["AppState"]
