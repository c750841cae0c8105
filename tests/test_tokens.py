import time

import pytest

from wastewise.auth.tokens import USER_TOKEN_MAX_AGE, TokenService

CLAIMS = {"id": 7, "email": "a@x.com", "name": "Alice"}


def test_verify_returns_created_claims():
    tokens = TokenService("s3cret")
    claims = tokens.verify(tokens.create(CLAIMS))
    assert claims is not None
    assert claims.identity() == CLAIMS
    assert claims.expires_at - claims.issued_at == USER_TOKEN_MAX_AGE


def test_name_may_be_null():
    tokens = TokenService("s3cret")
    claims = tokens.verify(tokens.create({"id": 1, "email": "b@x.com", "name": None}))
    assert claims is not None
    assert claims.name is None


def test_expired_token_is_rejected(monkeypatch):
    tokens = TokenService("s3cret")
    token = tokens.create(CLAIMS)
    future = time.time() + USER_TOKEN_MAX_AGE + 60
    monkeypatch.setattr(time, "time", lambda: future)
    assert tokens.verify(token) is None


def test_token_still_valid_just_before_expiry(monkeypatch):
    tokens = TokenService("s3cret")
    token = tokens.create(CLAIMS)
    soon = time.time() + USER_TOKEN_MAX_AGE - 60
    monkeypatch.setattr(time, "time", lambda: soon)
    assert tokens.verify(token) is not None


def test_tampered_token_is_rejected():
    tokens = TokenService("s3cret")
    token = tokens.create(CLAIMS)
    tampered = ("A" if token[0] != "A" else "B") + token[1:]
    assert tokens.verify(tampered) is None


def test_rotated_secret_invalidates_tokens():
    token = TokenService("old-secret").create(CLAIMS)
    assert TokenService("new-secret").verify(token) is None


@pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c", "...."])
def test_structurally_invalid_tokens_are_rejected(token):
    assert TokenService("s3cret").verify(token) is None


def test_signed_payload_without_identity_is_rejected():
    tokens = TokenService("s3cret")
    # Correctly signed, but not a claims object.
    forged = tokens._serializer.dumps({"email": "a@x.com"})
    assert tokens.verify(forged) is None


def test_empty_secret_is_refused():
    with pytest.raises(RuntimeError):
        TokenService("")
