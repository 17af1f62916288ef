# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain package.

This package provides the local identity collaborator:
- Password hashing with bcrypt
- Sign up / sign in / sign out
- Re-authentication, email and password changes
"""

from src.domains.auth.password import PasswordHasher
from src.domains.auth.service import (
    AuthenticationError,
    EmailAlreadyRegisteredError,
    IdentityService,
    InvalidCredentialsError,
    NotAuthenticatedError,
    ReauthenticationRequiredError,
    WeakPasswordError,
)

__all__ = [
    "PasswordHasher",
    "IdentityService",
    "AuthenticationError",
    "NotAuthenticatedError",
    "InvalidCredentialsError",
    "EmailAlreadyRegisteredError",
    "WeakPasswordError",
    "ReauthenticationRequiredError",
]
