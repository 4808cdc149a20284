"""
Tests for JWT issuance and verification.
"""

import jwt
import pytest

from auth.tokens import JWT_ALGORITHM, TokenIssuer, TokenRejection, TokenVerifier
from conftest import SECRET, T0, WEEK


def _flip(token: str, index: int) -> str:
    ch = token[index]
    return token[:index] + ("A" if ch != "A" else "B") + token[index + 1:]


class TestTokenIssuer:
    def test_round_trip(self, issuer, verifier):
        token = issuer.issue("42")
        assert verifier.verify(token) == "42"

    def test_subject_id_is_stringified(self, issuer, verifier):
        assert verifier.verify(issuer.issue(7)) == "7"

    def test_wire_format_is_three_segments(self, issuer):
        token = issuer.issue("42")
        assert token.count(".") == 2
        header = jwt.get_unverified_header(token)
        assert header["alg"] == JWT_ALGORITHM

    def test_claims(self, issuer):
        token = issuer.issue("42")
        claims = jwt.decode(token, SECRET, algorithms=[JWT_ALGORITHM], options={"verify_exp": False})
        assert claims == {"sub": "42", "iat": T0, "exp": T0 + WEEK}

    def test_deterministic_for_same_clock(self, issuer):
        assert issuer.issue("42") == issuer.issue("42")

    def test_default_window_is_seven_days(self):
        assert TokenIssuer(SECRET).expiry_seconds == 604800

    def test_blank_secret_refused(self):
        with pytest.raises(ValueError, match="jwt_secret_blank"):
            TokenIssuer("")
        with pytest.raises(ValueError, match="jwt_secret_blank"):
            TokenVerifier("")


class TestTokenExpiry:
    def test_valid_one_second_before_expiry(self, issuer, verifier, clock):
        token = issuer.issue("42")
        clock.now = T0 + WEEK - 1
        assert verifier.verify(token) == "42"

    def test_rejected_at_expiry(self, issuer, verifier, clock):
        token = issuer.issue("42")
        clock.now = T0 + WEEK
        assert verifier.verify(token) == TokenRejection("expired")

    def test_rejected_after_expiry(self, issuer, verifier, clock):
        token = issuer.issue("42")
        clock.now = T0 + WEEK + 3600
        assert verifier.verify(token) == TokenRejection("expired")

    def test_real_clock_accepts_fresh_token(self):
        token = TokenIssuer(SECRET).issue("42")
        assert TokenVerifier(SECRET).verify(token) == "42"


class TestTokenVerifier:
    def test_tampering_anywhere_is_rejected(self, issuer, verifier):
        token = issuer.issue("42")
        # The final character only carries base64 padding bits.
        for index in range(len(token) - 1):
            if token[index] == ".":
                continue
            result = verifier.verify(_flip(token, index))
            assert isinstance(result, TokenRejection), index

    def test_other_secret_is_bad_signature(self, verifier):
        forged = TokenIssuer("another-secret-0123456789abcdefgh", clock=lambda: T0).issue("42")
        assert verifier.verify(forged) == TokenRejection("bad_signature")

    def test_payload_swap_is_rejected(self, issuer, verifier):
        ours = issuer.issue("42").split(".")
        theirs = issuer.issue("1").split(".")
        spliced = ".".join([ours[0], theirs[1], ours[2]])
        assert verifier.verify(spliced) == TokenRejection("bad_signature")

    def test_alg_none_is_rejected(self, verifier):
        unsigned = jwt.encode({"sub": "42", "iat": T0, "exp": T0 + WEEK}, None, algorithm="none")
        assert verifier.verify(unsigned) == TokenRejection("malformed")

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "a.b", "...", None, 42])
    def test_garbage_is_malformed(self, verifier, token):
        assert verifier.verify(token) == TokenRejection("malformed")

    @pytest.mark.parametrize(
        "claims",
        [
            {"sub": "42", "iat": T0},
            {"sub": "42", "exp": T0 + WEEK},
            {"iat": T0, "exp": T0 + WEEK},
            {"sub": "42", "iat": T0, "exp": "later"},
            {"sub": "42", "iat": T0, "exp": True},
            {"sub": "", "iat": T0, "exp": T0 + WEEK},
        ],
    )
    def test_bad_claims_are_malformed(self, verifier, claims):
        token = jwt.encode(claims, SECRET, algorithm=JWT_ALGORITHM)
        assert verifier.verify(token) == TokenRejection("malformed")

    def test_rejection_is_falsy(self):
        assert not TokenRejection("expired")
