"""Tests for password hashing and token issuing."""

from datetime import timedelta

import pytest
from jose import jwt

from app.errors import InvalidInputError
from app.services.jwt import RESET_TOKEN, SESSION_TOKEN, JWTService
from app.services.password import PasswordHasher


class TestPasswordHasher:
    """Tests for bcrypt hashing and verification."""

    def test_hash_verifies(self, hasher: PasswordHasher):
        digest = hasher.hash("s3cret")
        assert digest != "s3cret"
        assert hasher.verify("s3cret", digest)

    def test_other_plaintext_does_not_verify(self, hasher: PasswordHasher):
        digest = hasher.hash("s3cret")
        assert not hasher.verify("s3cret ", digest)
        assert not hasher.verify("S3cret", digest)

    def test_hash_is_salted(self, hasher: PasswordHasher):
        """The same password hashes differently each time."""
        assert hasher.hash("same") != hasher.hash("same")

    def test_empty_password_rejected(self, hasher: PasswordHasher):
        with pytest.raises(InvalidInputError):
            hasher.hash("")

    def test_oversized_password_rejected(self, hasher: PasswordHasher):
        with pytest.raises(InvalidInputError):
            hasher.hash("x" * 73)

    def test_malformed_hash_does_not_verify(self, hasher: PasswordHasher):
        assert not hasher.verify("s3cret", "not-a-bcrypt-hash")
        assert not hasher.verify("s3cret", "")

    def test_empty_plaintext_does_not_verify(self, hasher: PasswordHasher):
        assert not hasher.verify("", hasher.hash("s3cret"))


class TestJWTService:
    """Tests for token issuing and verification."""

    def test_issue_and_verify(self, jwt_service: JWTService):
        token = jwt_service.issue({"id": 1, "email": "a@x.com"}, timedelta(minutes=5))
        payload = jwt_service.verify(token)
        assert payload["id"] == 1
        assert payload["email"] == "a@x.com"
        assert payload["exp"] > payload["iat"]

    def test_expired_token_rejected(self, jwt_service: JWTService):
        token = jwt_service.issue({"id": 1, "email": "a@x.com"}, timedelta(seconds=-1))
        assert jwt_service.verify(token) is None

    def test_token_from_other_secret_rejected(self, jwt_service: JWTService):
        other = JWTService(secret_key="another-secret")
        token = other.issue({"id": 1, "email": "a@x.com"}, timedelta(minutes=5))
        assert jwt_service.verify(token) is None

    def test_tampered_token_rejected(self, jwt_service: JWTService):
        token = jwt_service.create_session_token(1, "a@x.com", "alice")
        header, payload, signature = token.split(".")
        forged_payload = jwt.encode({"id": 2}, "irrelevant", algorithm="HS256").split(".")[1]
        assert jwt_service.verify(f"{header}.{forged_payload}.{signature}") is None

    def test_unsigned_token_rejected(self, jwt_service: JWTService):
        token = jwt_service.create_session_token(1, "a@x.com", "alice")
        header, payload, _ = token.split(".")
        assert jwt_service.verify(f"{header}.{payload}.") is None

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed_token_rejected(self, jwt_service: JWTService, token: str):
        assert jwt_service.verify(token) is None

    def test_session_token_claims(self, jwt_service: JWTService):
        token = jwt_service.create_session_token(7, "a@x.com", "alice")
        payload = jwt_service.verify(token, expected_type=SESSION_TOKEN)
        assert payload["id"] == 7
        assert payload["email"] == "a@x.com"
        assert payload["username"] == "alice"
        assert payload["exp"] - payload["iat"] == int(timedelta(days=7).total_seconds())

    def test_reset_token_claims(self, jwt_service: JWTService):
        token = jwt_service.create_reset_token(7, "a@x.com")
        payload = jwt_service.verify(token, expected_type=RESET_TOKEN)
        assert payload["id"] == 7
        assert "username" not in payload
        assert payload["exp"] - payload["iat"] == int(timedelta(hours=1).total_seconds())

    def test_token_type_enforced(self, jwt_service: JWTService):
        reset = jwt_service.create_reset_token(7, "a@x.com")
        session = jwt_service.create_session_token(7, "a@x.com", None)
        assert jwt_service.verify(reset, expected_type=SESSION_TOKEN) is None
        assert jwt_service.verify(session, expected_type=RESET_TOKEN) is None

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            JWTService(secret_key="")
