"""Auth API — signup and signin.

Learn: The only routes that work without a token:
- POST /signup → create an account (201), 409 if the username is taken
- POST /signin → username/password → "JWT <token>" valid for one hour
"""

import structlog
from fastapi import APIRouter, Depends, Request

from movieapi.auth.dependencies import get_token_service
from movieapi.auth.jwt import Identity, TokenService
from movieapi.auth.password import hash_password, verify_password
from movieapi.errors import InvalidPayload, Unauthenticated
from movieapi.repositories.users import UserRepository
from movieapi.schemas.user import (
    MessageResponse,
    SigninRequest,
    SignupRequest,
    TokenResponse,
)

logger = structlog.get_logger()

router = APIRouter()


def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.users


# ─── Signup ──────────────────────────────────────────────


@router.post("/signup", response_model=MessageResponse, status_code=201)
async def signup(
    body: SignupRequest,
    request: Request,
    users: UserRepository = Depends(get_user_repository),
):
    """Create a new user account."""
    if not body.username or not body.password:
        raise InvalidPayload("Please include both username and password.")

    rounds = request.app.state.settings.bcrypt_rounds
    user = await users.create(
        username=body.username,
        password_hash=hash_password(body.password, rounds=rounds),
        name=body.name,
    )
    logger.info("auth.signup", user_id=str(user.id), username=user.username)
    return MessageResponse(message="User created successfully.")


# ─── Signin ──────────────────────────────────────────────


@router.post("/signin", response_model=TokenResponse)
async def signin(
    body: SigninRequest,
    users: UserRepository = Depends(get_user_repository),
    tokens: TokenService = Depends(get_token_service),
):
    """Sign in with username and password → JWT."""
    user = await users.find_by_username(body.username) if body.username else None
    if not user:
        logger.info("auth.signin_failed", reason="not_found")
        raise Unauthenticated("User not found.")

    if not body.password or not verify_password(body.password, user.password_hash):
        logger.info("auth.signin_failed", reason="bad_password", username=user.username)
        raise Unauthenticated("Incorrect password.")

    token = tokens.issue(Identity(id=str(user.id), username=user.username))
    logger.info("auth.signin", username=user.username)
    return TokenResponse(token=tokens.as_header_value(token))
