"""Token service, header parsing and password hashing — no HTTP involved."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from movieapi.auth.dependencies import extract_token
from movieapi.auth.jwt import Identity, InvalidTokenError, TokenError, TokenService
from movieapi.auth.password import hash_password, verify_password
from movieapi.errors import Unauthenticated

SECRET = "unit-test-secret"
ALICE = Identity(id="6f1c2a4e-0000-4000-8000-000000000001", username="alice")


@pytest.fixture
def tokens():
    return TokenService(secret=SECRET)


def _ago(minutes: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=minutes)


# ─── issue / verify ──────────────────────────────────────


def test_issue_then_verify_round_trips_identity(tokens):
    assert tokens.verify(tokens.issue(ALICE)) == ALICE


def test_token_valid_at_59_minutes(tokens):
    """A token issued 59 minutes ago is still accepted."""
    token = tokens.issue(ALICE, now=_ago(59))
    assert tokens.verify(token) == ALICE


def test_token_rejected_at_61_minutes(tokens):
    """A token issued 61 minutes ago has expired."""
    token = tokens.issue(ALICE, now=_ago(61))
    with pytest.raises(InvalidTokenError, match="expired"):
        tokens.verify(token)


def test_custom_lifetime():
    short = TokenService(secret=SECRET, expires_minutes=5)
    with pytest.raises(InvalidTokenError):
        short.verify(short.issue(ALICE, now=_ago(6)))


def test_wrong_secret_rejected(tokens):
    other = TokenService(secret="another-secret")
    with pytest.raises(InvalidTokenError):
        tokens.verify(other.issue(ALICE))


def test_malformed_token_rejected(tokens):
    with pytest.raises(InvalidTokenError):
        tokens.verify("definitely.not.a-jwt")


def test_missing_identity_claim_rejected(tokens):
    token = jwt.encode(
        {"id": ALICE.id, "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        tokens.verify(token)


def test_token_without_exp_rejected(tokens):
    token = jwt.encode({"id": ALICE.id, "username": ALICE.username}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        tokens.verify(token)


def test_empty_secret_refused():
    with pytest.raises(TokenError):
        TokenService(secret="")


def test_header_value_prefix(tokens):
    assert tokens.as_header_value("abc") == "JWT abc"


# ─── Authorization header parsing ────────────────────────


@pytest.mark.parametrize(
    "header,expected",
    [
        ("JWT abc", "abc"),
        ("jwt abc", "abc"),
        ("  JWT   abc  ", "abc"),
    ],
)
def test_extract_token(header, expected):
    assert extract_token(header) == expected


@pytest.mark.parametrize("header", [None, "", "JWT", "Bearer abc", "abc"])
def test_extract_token_rejects(header):
    with pytest.raises(Unauthenticated):
        extract_token(header)


# ─── Passwords ───────────────────────────────────────────


def test_password_hash_verifies():
    h = hash_password("correct horse", rounds=4)
    assert h != "correct horse"
    assert verify_password("correct horse", h)
    assert not verify_password("wrong horse", h)


def test_password_hash_is_salted():
    assert hash_password("same", rounds=4) != hash_password("same", rounds=4)


def test_verify_against_garbage_hash():
    assert verify_password("anything", "not-a-bcrypt-hash") is False
