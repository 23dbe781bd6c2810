import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app import config
from app.database.config import AsyncSessionLocal
from app.database.models import StorageSlot

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the backing medium cannot be read or written."""

    pass


class KeyValueStorage:
    """Abstract base for a string-keyed slot store."""

    async def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored string, or None if the key was never written

        Raises:
            StorageError: If the medium cannot be read
        """
        raise NotImplementedError

    async def set(self, key: str, value: str) -> None:
        """
        Overwrite the value stored under a key.

        Raises:
            StorageError: If the medium cannot be written
        """
        raise NotImplementedError


class InMemoryStorage(KeyValueStorage):
    """Process-local storage, used for tests and throwaway demos."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._slots: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    async def set(self, key: str, value: str) -> None:
        self._slots[key] = value


class SqlStorage(KeyValueStorage):
    """
    Storage backed by the `storage_slots` table.

    Each key is one row; `set` replaces the row's value in a single commit.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, key: str) -> Optional[str]:
        try:
            async with self.session_factory() as session:
                slot = await session.get(StorageSlot, key)
                return slot.value if slot else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to read storage slot {key}: {str(e)}")
            raise StorageError(f"Failed to read slot {key}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            async with self.session_factory() as session:
                await session.merge(StorageSlot(key=key, value=value))
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to write storage slot {key}: {str(e)}")
            raise StorageError(f"Failed to write slot {key}") from e


def get_storage(
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> KeyValueStorage:
    """
    Factory function to get the configured storage backend.

    Reads STORAGE_BACKEND from configuration:
    - "sql": rows in the configured database (default)
    - "memory": process-local dict, lost on restart

    Args:
        session_factory: Session factory for the SQL backend. Defaults to
            the application's AsyncSessionLocal.
    """
    backend = config.STORAGE_BACKEND

    if backend == "memory":
        logger.info("Using in-memory storage")
        return InMemoryStorage()

    if backend != "sql":
        logger.warning(f"Unknown STORAGE_BACKEND: {backend}, falling back to sql")

    if session_factory is None:
        session_factory = AsyncSessionLocal

    logger.info("Using SQL storage")
    return SqlStorage(session_factory)
