"""Tests for bearer token handling and database URL helpers."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import jwt

from app.config import settings
from app.core.security import create_access_token, decode_access_token, token_subject
from app.database import to_async_url


def test_token_round_trip_carries_profile_id() -> None:
    profile_id = uuid4()
    token = create_access_token(profile_id, email="admin@example.com")

    assert token_subject(token) == profile_id
    assert decode_access_token(token)["email"] == "admin@example.com"


def test_expired_token_is_rejected() -> None:
    token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-5))
    assert token_subject(token) is None


def test_token_signed_with_another_secret_is_rejected() -> None:
    token = jwt.encode({"sub": str(uuid4())}, "not-the-secret", algorithm=settings.jwt_algorithm)
    assert decode_access_token(token) is None


def test_non_uuid_subject_is_rejected() -> None:
    token = jwt.encode({"sub": "admin"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    assert token_subject(token) is None


def test_audience_is_enforced_when_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    foreign = jwt.encode(
        {"sub": str(uuid4()), "aud": "other-app"},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    monkeypatch.setattr(settings, "jwt_audience", "authenticated")

    assert decode_access_token(foreign) is None
    assert token_subject(create_access_token(uuid4())) is not None


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("postgresql://u:p@db/synchora", "postgresql+asyncpg://u:p@db/synchora"),
        ("postgres://u:p@db/synchora", "postgresql+asyncpg://u:p@db/synchora"),
        ("postgresql+asyncpg://u:p@db/synchora", "postgresql+asyncpg://u:p@db/synchora"),
        ("sqlite://", "sqlite+aiosqlite://"),
    ],
)
def test_to_async_url(url: str, expected: str) -> None:
    assert to_async_url(url) == expected
