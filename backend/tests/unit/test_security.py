"""
Password hashing and JWT tokens.
"""
from datetime import timedelta

from jose import jwt

from app.core.config import settings
from app.core.security import create_access_token, decode_token, get_password_hash, verify_password


class TestPasswords:
    def test_hash_is_not_plaintext(self):
        hashed = get_password_hash("s3cret-pass")
        assert hashed != "s3cret-pass"
        assert hashed.startswith("$2")

    def test_verify(self):
        hashed = get_password_hash("s3cret-pass")
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("wrong-pass", hashed)

    def test_salted(self):
        assert get_password_hash("same") != get_password_hash("same")


class TestTokens:
    def test_round_trip(self):
        token = create_access_token({"sub": 42, "role": "Manager"})
        payload = decode_token(token)

        assert payload["sub"] == "42"
        assert payload["role"] == "Manager"
        assert payload["type"] == "access"
        assert payload["jti"]

    def test_unique_jti(self):
        first = decode_token(create_access_token({"sub": 1}))
        second = decode_token(create_access_token({"sub": 1}))
        assert first["jti"] != second["jti"]

    def test_expired_token(self):
        token = create_access_token({"sub": 1}, expires_delta=timedelta(seconds=-5))
        assert decode_token(token) is None

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "1", "type": "access"}, "another-key", algorithm=settings.ALGORITHM)
        assert decode_token(token) is None

    def test_garbage(self):
        assert decode_token("not-a-token") is None
