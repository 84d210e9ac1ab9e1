"""Movie API routes.

Learn: Every route here sits behind get_current_user (applied where the
router is included), so an unauthenticated request never reaches a
handler. Each handler walks the same short path:

    validate (writes only) → one repository call → envelope

Validation failures raise InvalidPayload before any storage call; storage
failures arrive as StorageError from the repository. Neither is caught
here: movieapi.errors turns them into responses.

Titles may contain "/" ("Face/Off"), so the title segment uses the path
converter and takes the rest of the URL, whether sent raw or as %2F.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request

from movieapi.errors import InvalidPayload, NotFound
from movieapi.repositories.movies import MovieRepository
from movieapi.schemas.movie import (
    DeleteResponse,
    MovieListResponse,
    MovieRead,
    MovieResponse,
)
from movieapi.services.validation import validate_movie_create, validate_movie_update

logger = structlog.get_logger()

router = APIRouter(prefix="/movies")


def get_movie_repository(request: Request) -> MovieRepository:
    return request.app.state.movies


async def read_json_body(request: Request) -> Any:
    """Parse the JSON body.

    Learn: A dependency, not a Body() parameter. FastAPI parses Body()
    before any dependency runs; this one resolves after the router-level
    auth dependency, so an anonymous caller gets 401 whatever it sent.
    """
    try:
        return await request.json()
    except ValueError as e:
        raise InvalidPayload("Request body must be valid JSON.") from e


@router.get("", response_model=MovieListResponse)
async def list_movies(repo: MovieRepository = Depends(get_movie_repository)):
    movies = await repo.find_all()
    return MovieListResponse(movies=[MovieRead.model_validate(m) for m in movies])


@router.post("", response_model=MovieResponse, status_code=201)
async def create_movie(
    payload: Any = Depends(read_json_body),
    repo: MovieRepository = Depends(get_movie_repository),
):
    """Add a movie. Needs a title, a release year, and a non-empty cast."""
    data = validate_movie_create(payload)
    movie = await repo.insert(data)
    logger.info("movies.created", movie_id=movie.id, title=movie.title)
    return MovieResponse(
        message="Movie added successfully",
        movie=MovieRead.model_validate(movie),
    )


@router.get("/{title:path}", response_model=MovieResponse)
async def get_movie(
    title: str,
    repo: MovieRepository = Depends(get_movie_repository),
):
    movie = await repo.find_by_title(title)
    if not movie:
        raise NotFound("Movie not found")
    return MovieResponse(movie=MovieRead.model_validate(movie))


@router.put("/{title:path}", response_model=MovieResponse)
async def update_movie(
    title: str,
    payload: Any = Depends(read_json_body),
    repo: MovieRepository = Depends(get_movie_repository),
):
    """Partially update the first movie with this title.

    Learn: Validation runs before the lookup, so an invalid body is a 400
    even when the title doesn't exist, and a rejected update never touches
    the stored record.
    """
    data = validate_movie_update(payload)
    movie = await repo.update_by_title(title, data)
    if not movie:
        raise NotFound("Movie not found.")
    logger.info("movies.updated", movie_id=movie.id, title=title)
    return MovieResponse(
        message="Movie updated successfully.",
        movie=MovieRead.model_validate(movie),
    )


@router.delete("/{title:path}", response_model=DeleteResponse)
async def delete_movie(
    title: str,
    repo: MovieRepository = Depends(get_movie_repository),
):
    """Delete the first movie with this title. Safe to repeat."""
    result = await repo.delete_by_title(title)
    if result.deleted:
        logger.info("movies.deleted", title=title)
        message = "Movie deleted"
    else:
        message = "Movie not found"
    return DeleteResponse(message=message, result=result)
