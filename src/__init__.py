"""ClassBook.

Recurring class scheduling and enrollment for schools: weekly series
generation, this-occurrence vs. this-and-future cascades, and
capacity-bounded membership.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
