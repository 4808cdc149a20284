"""
Auth API routes — register, login, validate-token.

Route prefix: /api/v1/auth
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from auth.dependencies import get_credential_service
from auth.errors import CredentialError, InvalidToken, MissingToken
from auth.password import MAX_PASSWORD_BYTES
from auth.service import CredentialService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ── Request / response schemas ─────────────────────────────────────────


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    email: str = Field(..., max_length=255, pattern=_EMAIL_PATTERN)
    password: str = Field(..., min_length=6)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=255, pattern=_EMAIL_PATTERN)
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class AuthResponse(BaseModel):
    message: str
    token: str
    user_id: str


class ValidateResponse(BaseModel):
    valid: bool


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    service: CredentialService = Depends(get_credential_service),
) -> Dict[str, Any]:
    """Register a new user."""
    result = await service.register(req.name, req.email, req.password)
    return {
        "message": "User registered successfully",
        "token": result.token,
        "user_id": result.subject_id,
    }


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    service: CredentialService = Depends(get_credential_service),
) -> Dict[str, Any]:
    """Login with email + password."""
    result = await service.authenticate(req.email, req.password)
    return {
        "message": "Login successful",
        "token": result.token,
        "user_id": result.subject_id,
    }


@router.get("/validate-token", response_model=ValidateResponse)
async def validate_token(
    authorization: Optional[str] = Header(None),
    service: CredentialService = Depends(get_credential_service),
) -> Dict[str, Any]:
    """Check the ``Authorization: Bearer <token>`` header."""
    result = service.validate_token(authorization)
    return {"valid": result.valid}


# ── Error mapping ──────────────────────────────────────────────────────


def register_exception_handlers(app: FastAPI) -> None:
    """Map credential and validation errors to the auth JSON error bodies."""

    @app.exception_handler(CredentialError)
    async def credential_error(request: Request, exc: CredentialError):
        body: Dict[str, Any] = {"error": exc.message}
        headers = None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        if isinstance(exc, (MissingToken, InvalidToken)):
            body["valid"] = False
        return JSONResponse(status_code=exc.status_code, content=body, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in err["loc"][1:]), "msg": err["msg"]}
            for err in exc.errors()
        ]
        logger.debug("%s %s rejected: %s", request.method, request.url.path, errors)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": errors})
