# File: tests/test_security.py

from datetime import timedelta

import pytest
from jose import jwt

from tazasu.core.errors import TokenExpired, TokenInvalid
from tazasu.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


def test_token_carries_identity_claims_for_seven_days(settings):
    token = create_access_token(3, "a@x.com", "user", settings)
    claims = decode_access_token(token, settings)
    assert claims["userId"] == 3
    assert claims["email"] == "a@x.com"
    assert claims["role"] == "user"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60


def test_expired_token(settings):
    token = create_access_token(
        3, "a@x.com", "user", settings, expires_delta=timedelta(seconds=-1)
    )
    with pytest.raises(TokenExpired):
        decode_access_token(token, settings)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_token(settings, token):
    with pytest.raises(TokenInvalid):
        decode_access_token(token, settings)


def test_tampered_signature(settings):
    token = create_access_token(3, "a@x.com", "user", settings)
    head, body, signature = token.split(".")
    tampered = ".".join([head, body, signature[::-1]])
    with pytest.raises(TokenInvalid):
        decode_access_token(tampered, settings)


def test_token_without_user_id_is_invalid(settings):
    token = jwt.encode({"email": "a@x.com"}, settings.jwt_secret, algorithm="HS256")
    with pytest.raises(TokenInvalid):
        decode_access_token(token, settings)


def test_password_hashing(settings):
    hashed = hash_password("secret1", settings)
    assert hashed != "secret1"
    assert verify_password("secret1", hashed, settings)
    assert not verify_password("secret2", hashed, settings)
    assert not verify_password("secret1", "not-a-hash", settings)
