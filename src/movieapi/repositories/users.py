"""Credential store — persistence for user accounts.

Learn: There is no "check if the username exists, then insert". The
insert is attempted and the unique constraint on users.username decides;
an IntegrityError becomes DuplicateKey (409). Anything else from the
driver becomes StorageError (500).
"""

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from movieapi.db.models import User
from movieapi.errors import DuplicateKey, StorageError

logger = structlog.get_logger()


class UserRepository:
    """create-if-absent and find by username."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_by_username(self, username: str) -> User | None:
        try:
            async with self.session_factory() as db:
                result = await db.execute(select(User).where(User.username == username))
                return result.scalars().first()
        except SQLAlchemyError as e:
            logger.error("storage.error", op="users.find_by_username", error=str(e))
            raise StorageError() from e

    async def create(
        self,
        username: str,
        password_hash: str,
        name: Optional[str] = None,
    ) -> User:
        user = User(name=name, username=username, password_hash=password_hash)
        try:
            async with self.session_factory() as db:
                db.add(user)
                await db.commit()
                await db.refresh(user)
                return user
        except IntegrityError as e:
            raise DuplicateKey("User already exists.") from e
        except SQLAlchemyError as e:
            logger.error("storage.error", op="users.create", error=str(e))
            raise StorageError() from e
