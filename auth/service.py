"""
Credential service — register, authenticate and token validation.

Each operation runs as a short linear sequence of steps and ends at the first
success or failure:

  register:        lookup → hash → insert → issue
  authenticate:    lookup → verify → issue
  validate_token:  extract bearer → verify

Store and hashing failures are logged here and surfaced to the caller as
``InternalError`` only.  Bcrypt runs in a worker thread so the event loop is
not held while hashing.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from auth.errors import (
    DuplicateEmail,
    InternalError,
    InvalidCredentials,
    InvalidToken,
    MissingToken,
)
from auth.models import AuthResult, Identity, TokenValidation
from auth.password import PasswordHasher
from auth.store import EmailAlreadyExists, UserStore
from auth.tokens import TokenIssuer, TokenRejection, TokenVerifier

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization`` header value, or ``None``."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


class CredentialService:
    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        verifier: TokenVerifier,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._issuer = issuer
        self._verifier = verifier
        # Compared against when the email is unknown, so both login
        # failures spend the same bcrypt time.
        self._dummy_hash = hasher.hash("dummy-password")

    async def _find(self, email: str) -> Optional[Identity]:
        try:
            return await self._store.find_by_email(email)
        except Exception:
            logger.exception("User lookup failed")
            raise InternalError()

    def _issue(self, subject_id: str) -> AuthResult:
        try:
            token = self._issuer.issue(subject_id)
        except Exception:
            logger.exception("Token issuance failed for %s", subject_id)
            raise InternalError()
        return AuthResult(token=token, subject_id=subject_id)

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        """Create an account and return a token for it."""
        if await self._find(email) is not None:
            raise DuplicateEmail()

        try:
            password_hash = await asyncio.to_thread(self._hasher.hash, password)
        except Exception:
            logger.exception("Password hashing failed")
            raise InternalError()

        try:
            user_id = str(await self._store.insert(name, email, password_hash))
        except EmailAlreadyExists:
            # Another request registered the same email after our lookup.
            raise DuplicateEmail()
        except Exception:
            logger.exception("User insert failed")
            raise InternalError()

        result = self._issue(user_id)
        logger.info("Registered user %s (%s)", name, user_id)
        return result

    async def authenticate(self, email: str, password: str) -> AuthResult:
        """Check email + password and return a fresh token."""
        user = await self._find(email)
        password_hash = user.password_hash if user is not None else self._dummy_hash

        try:
            matched = await asyncio.to_thread(self._hasher.verify, password, password_hash)
        except Exception:
            logger.exception("Password verification failed")
            raise InternalError()

        if user is None or not matched:
            raise InvalidCredentials()

        result = self._issue(user.id)
        logger.info("Login: %s (%s)", user.name, user.id)
        return result

    def validate_token(self, authorization: Optional[str]) -> TokenValidation:
        """Validate the bearer token in a raw ``Authorization`` header value."""
        token = extract_bearer_token(authorization)
        if token is None:
            raise MissingToken()

        subject = self._verifier.verify(token)
        if isinstance(subject, TokenRejection):
            raise InvalidToken()
        return TokenValidation(valid=True, subject_id=subject)
