"""
Database models package.
"""
from app.models.base import Base
from app.models.file_record import FileRecord

__all__ = [
    "Base",
    "FileRecord",
]
