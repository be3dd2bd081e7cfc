"""
Repository for committed file metadata.

The registry is the only component that touches the file_records table.
Uniqueness of slug and object_key is enforced by the table's UNIQUE
constraints; an insert is a single INSERT in its own transaction, never
a read-then-write.
"""
import logging

from sqlalchemy import select, func, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.file_record import FileRecord

logger = logging.getLogger(__name__)


class RegistryError(Exception):
    """Base class for registry failures."""


class DuplicateKeyError(RegistryError):
    """A record with the same slug or object key already exists."""


class RecordNotFoundError(RegistryError):
    """No record exists for the requested slug."""


class RegistryUnavailableError(RegistryError):
    """The database could not be reached or the statement failed."""


class FileRegistry:
    """
    Durable store of FileRecord rows keyed by slug.

    Holds a session factory and opens one short-lived session per call,
    so a single instance is shared by all requests.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def insert(
        self,
        slug: str,
        object_key: str,
        size_bytes: int,
        content_type: str
    ) -> FileRecord:
        """
        Insert a new record; id and created_at are assigned by the database.

        Raises:
            DuplicateKeyError: slug or object_key already committed
            RegistryUnavailableError: any other database failure
        """
        record = FileRecord(
            slug=slug,
            object_key=object_key,
            size_bytes=size_bytes,
            content_type=content_type,
        )

        try:
            async with self._session_factory() as db:
                db.add(record)
                try:
                    await db.commit()
                except IntegrityError as e:
                    await db.rollback()
                    raise DuplicateKeyError(
                        f"File with slug '{slug}' or object key '{object_key}' already exists"
                    ) from e
                await db.refresh(record)
        except RegistryError:
            raise
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Registry insert failed for slug {slug}: {e}")
            raise RegistryUnavailableError(str(e)) from e

        return record

    async def find_by_slug(self, slug: str) -> FileRecord:
        """
        Fetch the record for a slug.

        Raises:
            RecordNotFoundError: slug was never committed
            RegistryUnavailableError: database failure
        """
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(FileRecord).where(FileRecord.slug == slug)
                )
                record = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Registry lookup failed for slug {slug}: {e}")
            raise RegistryUnavailableError(str(e)) from e

        if record is None:
            raise RecordNotFoundError(f"File '{slug}' not found")
        return record

    async def count(self) -> int:
        """Total number of committed records, read fresh on every call."""
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(func.count()).select_from(FileRecord)
                )
                return int(result.scalar_one())
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Registry count failed: {e}")
            raise RegistryUnavailableError(str(e)) from e

    async def ping(self) -> None:
        """Round-trip to the database; raises RegistryUnavailableError."""
        try:
            async with self._session_factory() as db:
                await db.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            raise RegistryUnavailableError(str(e)) from e
