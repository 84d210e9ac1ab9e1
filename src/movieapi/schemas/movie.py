"""Pydantic schemas for movies.

Learn: The wire format is camelCase (releaseDate, actorName) while the
Python side is snake_case. alias_generator=to_camel bridges the two;
populate_by_name lets ORM objects and snake_case dicts validate too.

- MovieCreate: what you POST (release date and a non-empty cast required)
- MovieUpdate: what you PUT (partial; at least one of releaseDate,
  genre, actors; a cast, when given, needs 3+ entries)
- MovieRead: what the API returns

The domain rules live in validators that raise PydanticCustomError with
type "invalid_payload" so their messages reach clients verbatim.
"""

import enum
from typing import Any, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

MIN_RELEASE_YEAR = 1900
MAX_RELEASE_YEAR = 2100
MIN_UPDATE_ACTORS = 3

INVALID_PAYLOAD = "invalid_payload"


class Genre(str, enum.Enum):
    ACTION = "Action"
    ADVENTURE = "Adventure"
    COMEDY = "Comedy"
    DRAMA = "Drama"
    FANTASY = "Fantasy"
    HORROR = "Horror"
    MYSTERY = "Mystery"
    THRILLER = "Thriller"
    WESTERN = "Western"
    SCIENCE_FICTION = "Science Fiction"


GENRES = frozenset(g.value for g in Genre)

_RELEASE_DATE_ALIASES = AliasChoices("releaseDate", "releaseYear", "release_date")


def _violation(message: str) -> PydanticCustomError:
    return PydanticCustomError(INVALID_PAYLOAD, message)


# ─── Field rules ─────────────────────────────────────────

def check_title(value: str) -> str:
    value = value.strip()
    if not value:
        raise _violation("Title is required.")
    return value


def check_release_year(value: int) -> int:
    if value < MIN_RELEASE_YEAR or value > MAX_RELEASE_YEAR:
        raise _violation(
            f"Release year must be between {MIN_RELEASE_YEAR} and {MAX_RELEASE_YEAR}."
        )
    return value


def check_genre(value: str) -> str:
    if value not in GENRES:
        raise _violation("Invalid genre, please try again.")
    return value


# ─── Schemas ─────────────────────────────────────────────

class Actor(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    actor_name: Optional[str] = None
    character_name: Optional[str] = None


class MovieCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    release_date: int = Field(
        validation_alias=_RELEASE_DATE_ALIASES, serialization_alias="releaseDate"
    )
    genre: Optional[str] = None
    actors: list[Actor]

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: str) -> str:
        return check_title(value)

    @field_validator("release_date")
    @classmethod
    def _check_release_date(cls, value: int) -> int:
        return check_release_year(value)

    @field_validator("genre")
    @classmethod
    def _check_genre(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else check_genre(value)

    @field_validator("actors")
    @classmethod
    def _check_actors(cls, value: list[Actor]) -> list[Actor]:
        if not value:
            raise _violation("A movie must have at least one actor.")
        return value


class MovieUpdate(BaseModel):
    """Partial update — only provided, non-null fields are applied."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: Optional[str] = None
    release_date: Optional[int] = Field(
        None, validation_alias=_RELEASE_DATE_ALIASES, serialization_alias="releaseDate"
    )
    genre: Optional[str] = None
    actors: Optional[list[Actor]] = None

    @model_validator(mode="before")
    @classmethod
    def _something_to_update(cls, data: Any) -> Any:
        if isinstance(data, dict):
            keys = ("releaseDate", "releaseYear", "release_date", "genre", "actors")
            if all(data.get(k) is None for k in keys):
                raise _violation("Provide at least one field to update.")
        return data

    @field_validator("title")
    @classmethod
    def _check_title(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else check_title(value)

    @field_validator("release_date")
    @classmethod
    def _check_release_date(cls, value: Optional[int]) -> Optional[int]:
        return None if value is None else check_release_year(value)

    @field_validator("genre")
    @classmethod
    def _check_genre(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else check_genre(value)

    @field_validator("actors")
    @classmethod
    def _check_actors(cls, value: Optional[list[Actor]]) -> Optional[list[Actor]]:
        if value is not None and len(value) < MIN_UPDATE_ACTORS:
            raise _violation(f"A movie must have at least {MIN_UPDATE_ACTORS} actors.")
        return value

    def changes(self) -> dict[str, Any]:
        """The fields to merge into the stored record, keyed by column name."""
        data = self.model_dump(exclude_none=True)
        if "actors" in data:
            data["actors"] = [a.model_dump(by_alias=True) for a in self.actors]
        return data


class MovieRead(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    title: str
    release_date: Optional[int] = None
    genre: Optional[str] = None
    actors: list[Actor] = Field(default_factory=list)


class DeleteResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    deleted: bool
    deleted_count: int


# ─── Envelopes ───────────────────────────────────────────

class MovieResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    movie: MovieRead


class MovieListResponse(BaseModel):
    success: bool = True
    movies: list[MovieRead]


class DeleteResponse(BaseModel):
    success: bool = True
    message: str
    result: DeleteResult
