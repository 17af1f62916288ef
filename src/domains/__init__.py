# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for ClassBook.

This package contains domain services that encapsulate business logic.

Domains:
    app: Published client state and the operations that refresh it.
    auth: Local identity provider (sign up, sign in, credential changes).
    class_: Weekly series generation, series-wide updates and deletes.
    enrollment: Single and series-wide enrollment, capacity pre-check.
    school: School creation and teacher membership.
    user: Profile lookup and editing.
"""
