from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from ledger_api.core.security import create_signed_token, decode_signed_token

SECRET = "unit-test-secret-with-enough-length-000"


def _issue(**overrides):
    params = {
        "user_id": uuid4(),
        "session_id": "sid-1",
        "scope_id": uuid4(),
        "token_type": "access",
        "secret": SECRET,
        "algorithm": "HS256",
        "expires_in": timedelta(minutes=5),
    }
    params.update(overrides)
    token, expires = create_signed_token(**params)
    return token, expires, params


def test_access_token_roundtrip() -> None:
    token, expires, params = _issue()
    payload = decode_signed_token(
        token, secret=SECRET, algorithm="HS256", expected_type="access"
    )
    assert payload.user_id == params["user_id"]
    assert payload.scope_id == params["scope_id"]
    assert payload.session_id == "sid-1"
    assert payload.token_type == "access"
    assert payload.expires_at == expires.replace(microsecond=0)


def test_tokens_are_unique_per_issue() -> None:
    user_id = uuid4()
    first, _, _ = _issue(user_id=user_id)
    second, _, _ = _issue(user_id=user_id)
    assert first != second


def test_wrong_token_type_is_rejected() -> None:
    token, _, _ = _issue(token_type="refresh")
    with pytest.raises(ValueError):
        decode_signed_token(token, secret=SECRET, algorithm="HS256", expected_type="access")


def test_bad_signature_is_rejected() -> None:
    token, _, _ = _issue()
    with pytest.raises(jwt.InvalidSignatureError):
        decode_signed_token(
            token, secret="another-secret-entirely", algorithm="HS256", expected_type="access"
        )


def test_expired_token_is_rejected() -> None:
    token, _, _ = _issue(expires_in=timedelta(seconds=-30))
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_signed_token(token, secret=SECRET, algorithm="HS256", expected_type="access")


def test_scope_claim_is_optional() -> None:
    token, _, _ = _issue(scope_id=None)
    payload = decode_signed_token(
        token, secret=SECRET, algorithm="HS256", expected_type="access"
    )
    assert payload.scope_id is None
