"""Auth tests — signup, signin, and the JWT gate on movie routes.

Learn: Tests cover:
1. Signup + duplicate prevention (409 from the unique constraint)
2. Signin → "JWT <token>"
3. The movie routes with no / malformed / forged / valid tokens
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from movieapi.auth.jwt import Identity, TokenService


MOVIE = {
    "title": "Heat",
    "releaseDate": 1995,
    "genre": "Thriller",
    "actors": [
        {"actorName": "Al Pacino", "characterName": "Vincent Hanna"},
        {"actorName": "Robert De Niro", "characterName": "Neil McCauley"},
        {"actorName": "Val Kilmer", "characterName": "Chris Shiherlis"},
    ],
}


# ═══════════════════════════════════════════════════════════
# Signup
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_signup(unauthenticated_client):
    r = await unauthenticated_client.post(
        "/signup", json={"name": "Alice", "username": "alice", "password": "secret"}
    )
    assert r.status_code == 201
    assert r.json() == {"success": True, "message": "User created successfully."}


@pytest.mark.asyncio
async def test_signup_duplicate_username(unauthenticated_client):
    """signup a/p → 201, same username again → 409."""
    r1 = await unauthenticated_client.post("/signup", json={"username": "a", "password": "p"})
    assert r1.status_code == 201

    r2 = await unauthenticated_client.post("/signup", json={"username": "a", "password": "p"})
    assert r2.status_code == 409
    assert r2.json() == {"success": False, "message": "User already exists."}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"username": "bob"},
        {"password": "p"},
        {"username": "", "password": "p"},
        {},
    ],
)
async def test_signup_missing_fields(unauthenticated_client, body):
    r = await unauthenticated_client.post("/signup", json=body)
    assert r.status_code == 400
    assert r.json()["message"] == "Please include both username and password."


@pytest.mark.asyncio
async def test_signup_does_not_store_plaintext(app, unauthenticated_client):
    await unauthenticated_client.post("/signup", json={"username": "carol", "password": "hunter2"})
    user = await app.state.users.find_by_username("carol")
    assert user.password_hash != "hunter2"
    assert user.password_hash.startswith("$2")


# ═══════════════════════════════════════════════════════════
# Signin
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_signin_success(unauthenticated_client):
    await unauthenticated_client.post("/signup", json={"username": "dave", "password": "right"})

    r = await unauthenticated_client.post("/signin", json={"username": "dave", "password": "right"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["token"].startswith("JWT ")
    assert len(body["token"]) > len("JWT ")


@pytest.mark.asyncio
async def test_signin_token_claims(app, unauthenticated_client):
    await unauthenticated_client.post("/signup", json={"username": "erin", "password": "pw"})
    r = await unauthenticated_client.post("/signin", json={"username": "erin", "password": "pw"})

    raw = r.json()["token"].split(" ", 1)[1]
    claims = jwt.decode(raw, app.state.settings.jwt_secret, algorithms=["HS256"])
    assert claims["username"] == "erin"
    assert uuid.UUID(claims["id"])
    assert claims["exp"] - claims["iat"] == 3600


@pytest.mark.asyncio
async def test_signin_wrong_password(unauthenticated_client):
    await unauthenticated_client.post("/signup", json={"username": "frank", "password": "right"})

    r = await unauthenticated_client.post("/signin", json={"username": "frank", "password": "wrong"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Incorrect password."}


@pytest.mark.asyncio
async def test_signin_unknown_user(unauthenticated_client):
    r = await unauthenticated_client.post("/signin", json={"username": "nobody", "password": "x"})
    assert r.status_code == 401
    assert r.json()["message"] == "User not found."


@pytest.mark.asyncio
async def test_signin_missing_username(unauthenticated_client):
    r = await unauthenticated_client.post("/signin", json={"password": "x"})
    assert r.status_code == 401


# ═══════════════════════════════════════════════════════════
# The JWT gate
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_movie_without_token(app, unauthenticated_client):
    """POST /movies without auth → 401 and nothing is stored."""
    r = await unauthenticated_client.post("/movies", json=MOVIE)
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "JWT"
    assert r.json()["success"] is False

    assert await app.state.movies.find_all() == []


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["get", "delete"])
async def test_every_movie_route_requires_token(unauthenticated_client, method):
    r = await getattr(unauthenticated_client, method)("/movies/Heat")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_put_without_token_is_401_even_with_bad_body(unauthenticated_client):
    """Authentication runs before validation."""
    r = await unauthenticated_client.put("/movies/Heat", json={"genre": "Not-A-Genre"})
    assert r.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["post", "put"])
async def test_malformed_json_without_token_is_401(unauthenticated_client, method):
    """The body isn't parsed until the token has been checked."""
    path = "/movies" if method == "post" else "/movies/Heat"
    r = await getattr(unauthenticated_client, method)(
        path, content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert r.status_code == 401
    assert r.json()["success"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "header",
    [
        "",
        "JWT",
        "JWT ",
        "Bearer abc.def.ghi",
        "JWT not-a-token",
        "Basic dXNlcjpwYXNz",
    ],
)
async def test_malformed_auth_headers(unauthenticated_client, header):
    r = await unauthenticated_client.get("/movies", headers={"Authorization": header})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_token_signed_with_other_secret(unauthenticated_client):
    forged = TokenService(secret="someone-elses-secret").issue(Identity(id="1", username="mallory"))
    r = await unauthenticated_client.get("/movies", headers={"Authorization": f"JWT {forged}"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_expired_token(app, unauthenticated_client):
    expired = app.state.token_service.issue(
        Identity(id="1", username="old"),
        now=datetime.now(timezone.utc) - timedelta(minutes=61),
    )
    r = await unauthenticated_client.get("/movies", headers={"Authorization": f"JWT {expired}"})
    assert r.status_code == 401
    assert r.json()["message"] == "Token has expired"


@pytest.mark.asyncio
async def test_valid_token_grants_access(unauthenticated_client, auth_headers):
    r = await unauthenticated_client.get("/movies", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"success": True, "movies": []}


@pytest.mark.asyncio
async def test_scheme_is_case_insensitive(unauthenticated_client, auth_headers):
    token = auth_headers["Authorization"].split(" ", 1)[1]
    r = await unauthenticated_client.get("/movies", headers={"Authorization": f"jwt {token}"})
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_full_flow_with_real_token(unauthenticated_client, auth_headers):
    """signup → signin → create → read, all through the real JWT pipeline."""
    r = await unauthenticated_client.post("/movies", json=MOVIE, headers=auth_headers)
    assert r.status_code == 201

    r = await unauthenticated_client.get("/movies/Heat", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["movie"]["genre"] == "Thriller"
