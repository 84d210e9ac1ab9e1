"""movieapi CLI — run the server and talk to it.

Usage:
    movieapi serve                               # Run the API (uvicorn)
    movieapi signup alice                        # Create an account
    movieapi signin alice                        # Print a "JWT ..." token
    export MOVIEAPI_TOKEN="JWT eyJ..."
    movieapi movies list                         # All movies
    movieapi movies get Inception                # One movie by title
    movieapi movies add "Inception" --year 2010 --genre "Science Fiction" \\
        --actor "Leonardo DiCaprio:Cobb"
    movieapi movies update Inception --genre Thriller
    movieapi movies delete Inception
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional
from urllib.parse import quote

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8080"


def _api_url() -> str:
    return os.environ.get("MOVIEAPI_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the movie API."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _auth_header(token: Optional[str]) -> dict[str, str]:
    """Accept a token with or without the "JWT " prefix."""
    if not token:
        click.secho(
            "Error: --token required (or set MOVIEAPI_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    token = token.strip()
    if not token.lower().startswith("jwt "):
        token = f"JWT {token}"
    return {"Authorization": token}


def _movie_path(title: str) -> str:
    # "/" and "?" are legal in titles
    return f"/movies/{quote(title, safe='')}"


def _check(r: httpx.Response) -> dict:
    """Return the JSON body, or print the API's message and exit 1."""
    try:
        body = r.json()
    except ValueError:
        body = {"message": r.text}
    if r.status_code >= 400:
        message = body.get("message") or body.get("detail") or r.reason_phrase
        click.secho(f"Error ({r.status_code}): {message}", fg="red", err=True)
        sys.exit(1)
    return body


def _parse_actor(value: str) -> dict[str, str]:
    """Split "Actor Name:Character Name" into the API's actor object."""
    actor, _, character = value.partition(":")
    return {"actorName": actor.strip(), "characterName": character.strip()}


def _print_movie(movie: dict) -> None:
    click.secho(movie["title"], bold=True)
    click.echo(f"  Released: {movie.get('releaseDate') or '—'}")
    click.echo(f"  Genre:    {movie.get('genre') or '—'}")
    actors = movie.get("actors") or []
    if actors:
        click.echo("  Cast:")
        for a in actors:
            click.echo(f"    {a.get('actorName') or '?'} as {a.get('characterName') or '?'}")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="movieapi")
def main():
    """movieapi — movie catalogue API server and client."""


# ---------------------------------------------------------------------------
# movieapi serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", help="Bind address (default: MOVIEAPI_HOST or 0.0.0.0)")
@click.option("--port", type=int, help="Port (default: MOVIEAPI_PORT or 8080)")
@click.option("--reload", is_flag=True, help="Reload on code changes (development)")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server. Exits 1 if required settings are missing."""
    from pydantic import ValidationError

    from movieapi.config import get_settings

    try:
        settings = get_settings()
    except ValidationError as e:
        missing = ", ".join(
            f"MOVIEAPI_{str(err['loc'][0]).upper()}" for err in e.errors()
        )
        click.secho(f"Error: invalid or missing configuration: {missing}", fg="red", err=True)
        sys.exit(1)

    import uvicorn

    uvicorn.run(
        "movieapi.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# movieapi signup / signin
# ---------------------------------------------------------------------------


@main.command()
@click.argument("username")
@click.option("--name", "-n", help="Display name")
@click.option("--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True)
def signup(username: str, name: Optional[str], password: str):
    """Create an account."""
    _run(_signup_impl(username, name, password))


async def _signup_impl(username: str, name: Optional[str], password: str):
    body = {"username": username, "password": password}
    if name:
        body["name"] = name
    async with _client() as c:
        r = await c.post("/signup", json=body)
        data = _check(r)
    click.secho(data.get("message", "User created."), fg="green")


@main.command()
@click.argument("username")
@click.option("--password", "-p", prompt=True, hide_input=True)
def signin(username: str, password: str):
    """Sign in and print a token for MOVIEAPI_TOKEN."""
    _run(_signin_impl(username, password))


async def _signin_impl(username: str, password: str):
    async with _client() as c:
        r = await c.post("/signin", json={"username": username, "password": password})
        data = _check(r)
    click.echo(data["token"])


# ---------------------------------------------------------------------------
# movieapi movies ...
# ---------------------------------------------------------------------------

_token_option = click.option(
    "--token", "-T", envvar="MOVIEAPI_TOKEN", help="Token (or set MOVIEAPI_TOKEN)"
)


@main.group()
def movies():
    """List, show, add, update and delete movies."""


@movies.command("list")
@_token_option
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def list_movies(token: Optional[str], as_json: bool):
    """List all movies."""
    _run(_list_impl(token, as_json))


async def _list_impl(token: Optional[str], as_json: bool):
    headers = _auth_header(token)
    async with _client() as c:
        data = _check(await c.get("/movies", headers=headers))

    items = data.get("movies", [])
    if as_json:
        click.echo(_pretty_json(items))
        return
    if not items:
        click.echo("No movies found.")
        return

    click.secho(f"Movies ({len(items)}):", bold=True)
    for m in items:
        year = m.get("releaseDate") or "—"
        genre = m.get("genre") or "—"
        click.echo(f"  {m['title'][:40]:40s}  {str(year):6s}  {genre}")


@movies.command("get")
@click.argument("title")
@_token_option
def get_movie(title: str, token: Optional[str]):
    """Show one movie by title."""
    _run(_get_impl(title, token))


async def _get_impl(title: str, token: Optional[str]):
    headers = _auth_header(token)
    async with _client() as c:
        data = _check(await c.get(_movie_path(title), headers=headers))
    _print_movie(data["movie"])


@movies.command("add")
@click.argument("title")
@click.option("--year", "-y", type=int, required=True, help="Release year (1900-2100)")
@click.option("--genre", "-g", help="Genre, e.g. Drama")
@click.option("--actor", "-a", "actors", multiple=True, help='"Actor:Character", repeatable')
@_token_option
def add_movie(title: str, year: int, genre: Optional[str], actors: tuple[str, ...],
              token: Optional[str]):
    """Add a movie."""
    _run(_add_impl(title, year, genre, actors, token))


async def _add_impl(title: str, year: int, genre: Optional[str],
                    actors: tuple[str, ...], token: Optional[str]):
    headers = _auth_header(token)
    body: dict = {
        "title": title,
        "releaseDate": year,
        "actors": [_parse_actor(a) for a in actors],
    }
    if genre:
        body["genre"] = genre
    async with _client() as c:
        data = _check(await c.post("/movies", json=body, headers=headers))
    click.secho(data.get("message", "Movie added."), fg="green")
    _print_movie(data["movie"])


@movies.command("update")
@click.argument("title")
@click.option("--year", "-y", type=int, help="New release year")
@click.option("--genre", "-g", help="New genre")
@click.option("--actor", "-a", "actors", multiple=True,
              help='"Actor:Character", repeatable (replaces the cast, 3 minimum)')
@_token_option
def update_movie(title: str, year: Optional[int], genre: Optional[str],
                 actors: tuple[str, ...], token: Optional[str]):
    """Update a movie's year, genre and/or cast."""
    _run(_update_impl(title, year, genre, actors, token))


async def _update_impl(title: str, year: Optional[int], genre: Optional[str],
                       actors: tuple[str, ...], token: Optional[str]):
    headers = _auth_header(token)
    body: dict = {}
    if year is not None:
        body["releaseDate"] = year
    if genre:
        body["genre"] = genre
    if actors:
        body["actors"] = [_parse_actor(a) for a in actors]
    async with _client() as c:
        data = _check(await c.put(_movie_path(title), json=body, headers=headers))
    click.secho(data.get("message", "Movie updated."), fg="green")
    _print_movie(data["movie"])


@movies.command("delete")
@click.argument("title")
@_token_option
def delete_movie(title: str, token: Optional[str]):
    """Delete a movie by title."""
    _run(_delete_impl(title, token))


async def _delete_impl(title: str, token: Optional[str]):
    headers = _auth_header(token)
    async with _client() as c:
        data = _check(await c.delete(_movie_path(title), headers=headers))
    color = "green" if data["result"]["deleted"] else "yellow"
    click.secho(data.get("message", ""), fg=color)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
