"""
JWT token creation and verification.

Tokens are HS256-signed JWTs carrying the subject id (``sub``), the issue
time (``iat``) and the expiry (``exp``), all in whole seconds.  The signing
secret and the clock are passed in by the caller, so tests can pin both.

Expiry is checked here rather than by PyJWT so that the injected clock is
authoritative: a token is valid strictly before ``exp`` and rejected from
``exp`` onwards.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Union

import jwt

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
DEFAULT_EXPIRY_SECONDS = 86400 * 7

Clock = Callable[[], float]


@dataclass(frozen=True)
class TokenRejection:
    """Why a token was refused.  ``reason`` is one of
    ``malformed``, ``bad_signature`` or ``expired``."""

    reason: str

    def __bool__(self) -> bool:
        return False


def _require_secret(secret: str) -> str:
    if not secret:
        raise ValueError("jwt_secret_blank")
    return secret


class TokenIssuer:
    def __init__(
        self,
        secret: str,
        expiry_seconds: int = DEFAULT_EXPIRY_SECONDS,
        clock: Clock = time.time,
    ) -> None:
        self._secret = _require_secret(secret)
        self.expiry_seconds = expiry_seconds
        self._clock = clock

    def issue(self, subject_id: str) -> str:
        """Create a signed token for ``subject_id``."""
        now = int(self._clock())
        payload = {
            "sub": str(subject_id),
            "iat": now,
            "exp": now + self.expiry_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)


class TokenVerifier:
    def __init__(self, secret: str, clock: Clock = time.time) -> None:
        self._secret = _require_secret(secret)
        self._clock = clock

    def verify(self, token: str) -> Union[str, TokenRejection]:
        """
        Verify ``token`` and return its subject id.

        Never raises on bad input; returns a ``TokenRejection`` instead.
        """
        if not isinstance(token, str) or not token:
            return TokenRejection("malformed")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={
                    "require": ["sub", "iat", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidSignatureError:
            logger.debug("Rejected token: bad signature")
            return TokenRejection("bad_signature")
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected token: %s", exc)
            return TokenRejection("malformed")

        exp = payload["exp"]
        sub = payload["sub"]
        if isinstance(exp, bool) or not isinstance(exp, int) or not isinstance(sub, str) or not sub:
            return TokenRejection("malformed")
        if self._clock() >= exp:
            logger.debug("Rejected token for %s: expired", sub)
            return TokenRejection("expired")
        return sub
