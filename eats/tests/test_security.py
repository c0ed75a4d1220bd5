"""Tests for security utilities (JWT, password hashing)."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from eats.app.core.config import Settings
from eats.app.core.security import TokenService, hash_password, verify_password


def test_password_hash_and_verify():
    hashed = hash_password("mysecret")
    assert hashed != "mysecret"
    assert verify_password("mysecret", hashed)
    assert not verify_password("wrong", hashed)


def test_sign_and_verify(tokens: TokenService):
    token = tokens.sign(42)
    claims = tokens.verify(token)
    assert claims["sub"] == "42"
    assert tokens.user_id_from(token) == 42


def test_expired_token_rejected(tokens: TokenService):
    token = tokens.sign(1, expires_delta=timedelta(seconds=-5))
    assert tokens.verify(token) is None
    assert tokens.user_id_from(token) is None


def test_invalid_token():
    tokens = TokenService(Settings(jwt_secret="a-secret"))
    assert tokens.verify("garbage.token.here") is None


def test_token_from_other_secret_rejected():
    issued = TokenService(Settings(jwt_secret="one-secret")).sign(7)
    assert TokenService(Settings(jwt_secret="another-secret")).verify(issued) is None


def test_settings_are_frozen():
    config = Settings()
    with pytest.raises(ValidationError):
        config.jwt_secret = "changed"
