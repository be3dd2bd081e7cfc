"""
FileRecord model for committed uploads.

Stores metadata about files uploaded directly to object storage.
The actual file bytes live in the bucket, not the database.

Lifecycle:
1. Client requests an upload -> nothing is written here
2. Client uploads to storage with the presigned URL
3. Client finalizes the upload -> exactly one row is inserted
4. Anyone holding the slug resolves it to the public URL

Rows are never updated or deleted by the service.
"""
from sqlalchemy import Column, String, Integer, BigInteger, DateTime
from sqlalchemy.sql import func

from app.models.base import Base


class FileRecord(Base):
    """
    Committed file metadata.

    Attributes:
        id: Surrogate key assigned by the database
        slug: Public identifier embedded in shareable links (unique)
        object_key: Key of the object in the storage bucket (unique)
        size_bytes: File size in bytes
        content_type: MIME type declared by the uploader
        created_at: When the upload was committed
    """
    __tablename__ = "file_records"

    # BigInteger on Postgres, INTEGER on SQLite so autoincrement works there
    id = Column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )

    # Uniqueness is enforced by the database; inserts rely on it
    slug = Column(String(128), nullable=False, unique=True)

    # Example: uploads/1718000000000/3f2b.../report.pdf
    object_key = Column(String(1024), nullable=False, unique=True)

    size_bytes = Column(BigInteger, nullable=False)

    content_type = Column(String(255), nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    def __repr__(self):
        return (
            f"<FileRecord(id={self.id}, slug={self.slug}, "
            f"size={self.size_bytes}, type={self.content_type})>"
        )
