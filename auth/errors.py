"""
Caller-facing credential errors.

Each error carries the HTTP status it maps to and a fixed public message.
Underlying causes are logged where they are caught and never put in the
message.
"""

from __future__ import annotations

from fastapi import status


class CredentialError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class DuplicateEmail(CredentialError):
    status_code = status.HTTP_409_CONFLICT
    message = "Email already in use"


class InvalidCredentials(CredentialError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid email or password"


class MissingToken(CredentialError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "No token provided"


class InvalidToken(CredentialError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid or expired token"


class InternalError(CredentialError):
    pass
