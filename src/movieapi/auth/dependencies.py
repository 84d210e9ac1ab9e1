"""FastAPI auth dependencies.

Learn: get_current_user is the authentication "middleware". It is applied
at include_router level (see movieapi.api), so it runs before any movie
handler and before the request body is validated:

1. Read the Authorization header, expecting "JWT <token>".
2. Verify the token with the app's TokenService.
3. Attach the Identity to request.state and to the structlog context.

Any failure raises Unauthenticated (401) and the handler never runs.
"""

from typing import Optional

import structlog
from fastapi import Header, Request

from movieapi.auth.jwt import TOKEN_SCHEME, Identity, TokenError, TokenService
from movieapi.errors import Unauthenticated

logger = structlog.get_logger()


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def extract_token(authorization: Optional[str]) -> str:
    """Pull the raw token out of an Authorization header value."""
    if not authorization:
        raise Unauthenticated("No auth token")
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != TOKEN_SCHEME.lower() or not token.strip():
        raise Unauthenticated("Malformed auth header")
    return token.strip()


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> Identity:
    """Extract and verify the current identity (401 if absent or invalid)."""
    token = extract_token(authorization)
    try:
        identity = get_token_service(request).verify(token)
    except TokenError as e:
        logger.info("auth.token_rejected", reason=str(e), path=request.url.path)
        raise Unauthenticated(str(e))

    request.state.identity = identity
    structlog.contextvars.bind_contextvars(
        user_id=identity.id, username=identity.username
    )
    return identity
