"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
A token carries the user's id and username plus an absolute expiry
(issued-at + 60 minutes by default). Nothing is stored server-side:
a token is valid exactly when its signature checks out and it has not
expired. There is no revocation; logging out means waiting out the hour.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

TOKEN_SCHEME = "JWT"


class TokenError(Exception):
    """Raised when token creation/verification fails."""


class InvalidTokenError(TokenError):
    """Signature mismatch, malformed token, missing claims, or expired."""


@dataclass(frozen=True)
class Identity:
    """The verified claims of a token."""

    id: str
    username: str


class TokenService:
    """Issues and verifies signed, time-limited bearer tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_minutes: int = 60,
    ):
        if not secret:
            raise TokenError("A signing secret is required")
        self.secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    def issue(self, identity: Identity, now: Optional[datetime] = None) -> str:
        """Create a signed token for an identity.

        `now` is the issuance time (defaults to the current UTC time);
        the token expires `expires_minutes` after it.
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "id": identity.id,
            "username": identity.username,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self.expires_minutes),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        """Verify a token and return its identity.

        Raises InvalidTokenError on any failure.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "id", "username"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        user_id, username = payload["id"], payload["username"]
        if not isinstance(user_id, str) or not isinstance(username, str):
            raise InvalidTokenError("Invalid token: malformed identity claims")
        return Identity(id=user_id, username=username)

    def as_header_value(self, token: str) -> str:
        """Render a token the way clients send it back: "JWT <token>"."""
        return f"{TOKEN_SCHEME} {token}"
