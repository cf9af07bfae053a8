from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from src.taskpulse.taskpulse.core.exceptions import AuthenticationError
from src.taskpulse.taskpulse.security.context import extract_bearer
from src.taskpulse.taskpulse.security.tokens import TokenCodec

SECRET = "unit-test-secret-with-enough-length"


def test_round_trip_user_id():
    codec = TokenCodec(SECRET)
    assert codec.decode(codec.issue(42)) == 42


def test_token_expires():
    issued = datetime.now(timezone.utc) - timedelta(days=8)
    old = TokenCodec(SECRET, expires_days=7, clock=lambda: issued).issue(1)

    with pytest.raises(AuthenticationError):
        TokenCodec(SECRET).decode(old)


def test_token_signed_with_other_secret_is_rejected():
    token = TokenCodec("another-secret-that-is-long-enough").issue(1)
    with pytest.raises(AuthenticationError):
        TokenCodec(SECRET).decode(token)


def test_token_without_numeric_id_is_rejected():
    token = jwt.encode({"id": "1", "exp": datetime.now(timezone.utc) + timedelta(hours=1)}, SECRET, algorithm="HS256")
    with pytest.raises(AuthenticationError):
        TokenCodec(SECRET).decode(token)


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenCodec("")


@pytest.mark.parametrize(
    "header,expected",
    [
        ("Bearer abc.def", "abc.def"),
        ("bearer abc", "abc"),
        ("Bearer null", None),
        ("Bearer ", None),
        ("Basic abc", None),
        (None, None),
    ],
)
def test_extract_bearer(header, expected):
    assert extract_bearer(header) == expected
