"""
FastAPI dependencies for authentication.
"""

from __future__ import annotations

from fastapi import Request

from auth.service import CredentialService


def get_credential_service(request: Request) -> CredentialService:
    """Return the service built by ``main.create_app`` for this app."""
    return request.app.state.credentials
