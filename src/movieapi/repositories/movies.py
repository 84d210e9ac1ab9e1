"""Movie repository — persistence for movie records.

Learn: The repository is built once per app and holds a session factory,
not a session. Each method is one unit of work in its own session, so
concurrent requests never share state through it.

Titles are a natural key without a uniqueness guarantee. find, update and
delete by title all act on the first match, meaning the earliest inserted
movie with that title.

Driver errors never escape: they are logged and re-raised as StorageError.
"""

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from movieapi.db.models import Movie
from movieapi.errors import StorageError
from movieapi.schemas.movie import DeleteResult, MovieCreate, MovieUpdate

logger = structlog.get_logger()


class MovieRepository:
    """find-all / find / insert / update / delete movies by title."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @staticmethod
    def _first_by_title(title: str):
        return select(Movie).where(Movie.title == title).order_by(Movie.id).limit(1)

    async def find_all(self) -> list[Movie]:
        try:
            async with self.session_factory() as db:
                result = await db.execute(select(Movie).order_by(Movie.id))
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("storage.error", op="movies.find_all", error=str(e))
            raise StorageError("GET request failed") from e

    async def find_by_title(self, title: str) -> Movie | None:
        try:
            async with self.session_factory() as db:
                result = await db.execute(self._first_by_title(title))
                return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error("storage.error", op="movies.find_by_title", error=str(e))
            raise StorageError() from e

    async def insert(self, data: MovieCreate) -> Movie:
        movie = Movie(
            title=data.title,
            release_date=data.release_date,
            genre=data.genre,
            actors=[a.model_dump(by_alias=True) for a in data.actors],
        )
        try:
            async with self.session_factory() as db:
                db.add(movie)
                await db.commit()
                await db.refresh(movie)
                return movie
        except SQLAlchemyError as e:
            logger.error("storage.error", op="movies.insert", error=str(e))
            raise StorageError("POST request failed") from e

    async def update_by_title(self, title: str, data: MovieUpdate) -> Movie | None:
        """Merge the provided fields into the first movie with this title."""
        try:
            async with self.session_factory() as db:
                result = await db.execute(self._first_by_title(title))
                movie = result.scalars().first()
                if not movie:
                    return None
                for field, value in data.changes().items():
                    setattr(movie, field, value)
                await db.commit()
                await db.refresh(movie)
                return movie
        except SQLAlchemyError as e:
            logger.error("storage.error", op="movies.update_by_title", error=str(e))
            raise StorageError() from e

    async def delete_by_title(self, title: str) -> DeleteResult:
        """Delete the first movie with this title. Deleting nothing is not an error."""
        try:
            async with self.session_factory() as db:
                first_id = (
                    select(Movie.id)
                    .where(Movie.title == title)
                    .order_by(Movie.id)
                    .limit(1)
                    .scalar_subquery()
                )
                result = await db.execute(
                    delete(Movie)
                    .where(Movie.id == first_id)
                    .execution_options(synchronize_session=False)
                )
                count = result.rowcount or 0
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("storage.error", op="movies.delete_by_title", error=str(e))
            raise StorageError() from e

        return DeleteResult(deleted=count > 0, deleted_count=count)
