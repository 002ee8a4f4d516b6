"""
Tests for password hashing and session tokens
"""

from datetime import timedelta

import jwt
import pytest

from lessonbook.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestPasswordHashing:

    def test_hash_differs_from_plaintext(self):
        assert hash_password("secret123") != "secret123"

    def test_same_plaintext_hashes_differently(self):
        assert hash_password("secret123") != hash_password("secret123")

    def test_verify(self):
        hashed = hash_password("secret123")
        assert verify_password("secret123", hashed)
        assert not verify_password("secret124", hashed)

    def test_verify_empty_inputs(self):
        assert not verify_password("", hash_password("secret123"))
        assert not verify_password("secret123", "")


class TestAccessTokens:

    def test_round_trip_subject(self):
        token = create_access_token("user-1")
        assert decode_access_token(token) == "user-1"

    def test_expired_token_rejected(self):
        token = create_access_token("user-1", expires_delta=timedelta(seconds=-1))
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token)

    def test_foreign_signature_rejected(self):
        token = jwt.encode({"sub": "user-1"}, "another-secret", algorithm="HS256")
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(token)

    def test_token_without_subject_rejected(self):
        from lessonbook.core.config import settings

        token = jwt.encode({"foo": "bar"}, settings.secret_key, algorithm=settings.algorithm)
        with pytest.raises(jwt.InvalidTokenError):
            decode_access_token(token)
