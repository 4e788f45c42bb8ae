"""Authentication services."""

from spendwise.services.auth.credentials import (
    AuthError,
    CredentialService,
    EmailTakenError,
    InvalidCredentialsError,
    UnauthenticatedError,
    WeakPasswordError,
    extract_token,
)

__all__ = [
    "AuthError",
    "CredentialService",
    "EmailTakenError",
    "InvalidCredentialsError",
    "UnauthenticatedError",
    "WeakPasswordError",
    "extract_token",
]
