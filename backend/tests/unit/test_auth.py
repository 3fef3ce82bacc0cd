"""Unit tests for bearer tokens and password hashing

Tests cover:
- Token creation and decoding
- Expired and tampered tokens
- Argon2id hashing with pepper
- Unusable password markers written by anonymization
- Password strength validation
"""

from uuid import uuid4

import jwt
import pytest
from argon2 import PasswordHasher

from memberportal.auth.jwt import create_access_token, decode_token
from memberportal.auth.password import (
    UNUSABLE_PASSWORD_PREFIX,
    hash_password,
    make_unusable_password_hash,
    validate_password_strength,
)


class TestAccessToken:

    def test_token_contains_claims(self, monkeypatch):
        monkeypatch.setenv('JWT_SECRET', 'test-secret-key-256-bits-minimum-length-required-for-security')
        user_id = uuid4()

        token = create_access_token(user_id=user_id, email="admin@example.com", is_admin=True)
        payload = decode_token(token)

        assert payload['sub'] == str(user_id)
        assert payload['email'] == "admin@example.com"
        assert payload['is_admin'] is True
        assert payload['exp'] > payload['iat']

    def test_expired_token_rejected(self, monkeypatch):
        monkeypatch.setenv('JWT_SECRET', 'test-secret-key-256-bits-minimum-length-required-for-security')
        monkeypatch.setenv('JWT_EXPIRY_MINUTES', '-1')

        token = create_access_token(user_id=uuid4(), email="member@example.com")

        with pytest.raises(jwt.ExpiredSignatureError):
            decode_token(token)

    def test_token_signed_with_other_secret_rejected(self, monkeypatch):
        monkeypatch.setenv('JWT_SECRET', 'first-secret-key-256-bits-minimum-length-required-for-security')
        token = create_access_token(user_id=uuid4(), email="member@example.com")

        monkeypatch.setenv('JWT_SECRET', 'second-secret-key-256-bits-minimum-length-required-for-security')
        with pytest.raises(jwt.InvalidSignatureError):
            decode_token(token)

    def test_missing_secret_raises(self, monkeypatch):
        monkeypatch.delenv('JWT_SECRET', raising=False)

        with pytest.raises(ValueError, match="JWT_SECRET environment variable is not set"):
            create_access_token(user_id=uuid4(), email="member@example.com")


class TestPasswordHashing:

    def test_hash_uses_argon2id_with_pepper(self, monkeypatch):
        monkeypatch.setenv('PASSWORD_PEPPER', 'test-pepper-secret')

        hashed = hash_password("SecureP@ss123")

        assert hashed.startswith('$argon2id$')
        assert PasswordHasher().verify(hashed, "SecureP@ss123" + 'test-pepper-secret')

    def test_hash_without_pepper_raises(self, monkeypatch):
        monkeypatch.delenv('PASSWORD_PEPPER', raising=False)

        with pytest.raises(ValueError, match="PASSWORD_PEPPER environment variable is not set"):
            hash_password("SecureP@ss123")

    def test_empty_password_raises(self, monkeypatch):
        monkeypatch.setenv('PASSWORD_PEPPER', 'test-pepper-secret')

        with pytest.raises(ValueError, match="Password cannot be empty"):
            hash_password("")

    def test_unusable_hash_is_random_and_not_argon2(self):
        first = make_unusable_password_hash()
        second = make_unusable_password_hash()

        assert first.startswith(UNUSABLE_PASSWORD_PREFIX)
        assert not first.startswith('$argon2')
        assert first != second


class TestPasswordStrength:

    @pytest.mark.parametrize("password, message", [
        ("Sh0rt!", "at least 8 characters"),
        ("lowercase1!", "uppercase"),
        ("UPPERCASE1!", "lowercase"),
        ("NoDigits!!", "digit"),
        ("NoSpecial123", "special character"),
    ])
    def test_weak_passwords(self, password, message):
        is_valid, error = validate_password_strength(password)

        assert not is_valid
        assert message in error

    def test_strong_password(self):
        assert validate_password_strength("SecureP@ss123") == (True, "")
