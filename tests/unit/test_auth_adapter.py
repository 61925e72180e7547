from datetime import UTC, datetime, timedelta
from uuid import uuid4

from cgwise.adapters.auth.crypto import JWTAuthAdapter
from cgwise.api.auth_utils import create_access_token, decode_access_token


def test_password_hash_round_trip() -> None:
    adapter = JWTAuthAdapter()
    hashed = adapter.hash_password("s3cret")
    assert hashed.startswith("$argon2")
    assert adapter.verify_password("s3cret", hashed)
    assert not adapter.verify_password("wrong", hashed)


def test_unknown_hash_format_is_mismatch() -> None:
    adapter = JWTAuthAdapter()
    assert not adapter.verify_password("s3cret", "")
    assert not adapter.verify_password("s3cret", "plain-text")


def test_token_subject() -> None:
    adapter = JWTAuthAdapter()
    user_id = uuid4()
    token = adapter.create_token(user_id, ttl_minutes=5)
    assert adapter.validate_token(token) == str(user_id)
    assert adapter.validate_token(token + "x") is None


def test_expired_token() -> None:
    issued = datetime.now(UTC) - timedelta(hours=2)
    token = create_access_token({"sub": "abc"}, timedelta(minutes=30), now_utc=issued)
    assert decode_access_token(token) is None
