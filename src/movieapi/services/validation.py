"""Movie payload validation.

Learn: Pure functions, no I/O. Each takes the raw JSON body and returns
either a normalized schema instance or raises InvalidPayload carrying the
first rule violated. Pydantic reports errors in field order (title,
releaseDate, genre, actors), which gives fail-fast semantics for free.

Note the two cast rules. Create only requires a non-empty cast; update
requires at least three actors. The original service behaved this way and
the mismatch is kept, not unified, until the product side settles it.
"""

from typing import Any

from pydantic import ValidationError

from movieapi.errors import InvalidPayload
from movieapi.schemas.movie import INVALID_PAYLOAD, MovieCreate, MovieUpdate


def first_violation(exc: ValidationError) -> str:
    """Render the first pydantic error as a client-facing message."""
    errors = exc.errors()
    if not errors:
        return InvalidPayload.default_message
    err = errors[0]
    if err["type"] == INVALID_PAYLOAD:
        return err["msg"]
    field = ".".join(str(p) for p in err["loc"])
    if err["type"] == "missing":
        return f"{field} is required."
    if not field:
        return err["msg"]
    return f"{field}: {err['msg']}"


def validate_movie_create(payload: Any) -> MovieCreate:
    if not isinstance(payload, dict):
        raise InvalidPayload("Movie payload must be a JSON object.")
    try:
        return MovieCreate.model_validate(payload)
    except ValidationError as e:
        raise InvalidPayload(first_violation(e))


def validate_movie_update(payload: Any) -> MovieUpdate:
    if not isinstance(payload, dict):
        raise InvalidPayload("Movie payload must be a JSON object.")
    try:
        return MovieUpdate.model_validate(payload)
    except ValidationError as e:
        raise InvalidPayload(first_violation(e))
