"""
Value objects passed between the credential service, its stores and callers.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """A registered account as the store returns it."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    password_hash: str = Field(repr=False)


class AuthResult(BaseModel):
    token: str
    subject_id: str


class TokenValidation(BaseModel):
    valid: bool = True
    subject_id: str
