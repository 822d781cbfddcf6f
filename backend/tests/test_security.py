from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from famcare.core import security
from famcare.core.config import get_settings


def test_password_hash_round_trip() -> None:
    digest = security.hash_password("correct horse")
    assert digest != "correct horse"
    assert security.verify_password("correct horse", digest)
    assert not security.verify_password("wrong horse", digest)


def test_malformed_digest_never_verifies() -> None:
    assert not security.verify_password("anything", "not-a-real-hash")
    assert not security.verify_password("anything", "")


def test_access_token_carries_subject_and_claims() -> None:
    token, expires_at = security.create_access_token("user-1", {"email": "a@example.com"})
    payload = security.decode_access_token(token)

    assert payload["sub"] == "user-1"
    assert payload["email"] == "a@example.com"
    assert payload["iss"] == "famcare"
    assert payload["aud"] == "famcare-clients"
    assert payload["exp"] == int(expires_at.timestamp())
    assert expires_at > datetime.now(UTC)


def test_access_token_with_foreign_audience_is_rejected() -> None:
    settings = get_settings()
    now = datetime.now(UTC)
    token = jwt.encode(
        {
            "sub": "user-1",
            "iss": settings.jwt_issuer,
            "aud": "someone-else",
            "iat": now,
            "exp": now + timedelta(minutes=5),
        },
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(ValueError):
        security.decode_access_token(token)


def test_expired_or_tampered_access_token_is_rejected() -> None:
    settings = get_settings()
    now = datetime.now(UTC)
    expired = jwt.encode(
        {
            "sub": "user-1",
            "iss": settings.jwt_issuer,
            "aud": settings.jwt_audience,
            "iat": now - timedelta(hours=1),
            "exp": now - timedelta(minutes=1),
        },
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(ValueError):
        security.decode_access_token(expired)

    forged = jwt.encode(
        {
            "sub": "user-1",
            "iss": settings.jwt_issuer,
            "aud": settings.jwt_audience,
            "iat": now,
            "exp": now + timedelta(minutes=5),
        },
        settings.secret_key + "-forged",
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(ValueError):
        security.decode_access_token(forged)


def test_refresh_token_values_are_random_and_hashed() -> None:
    first = security.new_refresh_token_value()
    second = security.new_refresh_token_value()
    assert first != second
    assert len(first) >= 64

    digest = security.hash_refresh_token(first)
    assert digest == security.hash_refresh_token(first)
    assert len(digest) == 64
    assert first not in digest
