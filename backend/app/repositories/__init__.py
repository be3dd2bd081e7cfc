"""
Repository layer for database operations.
"""
from app.repositories.file_registry import (
    FileRegistry,
    RegistryError,
    DuplicateKeyError,
    RecordNotFoundError,
    RegistryUnavailableError,
)

__all__ = [
    "FileRegistry",
    "RegistryError",
    "DuplicateKeyError",
    "RecordNotFoundError",
    "RegistryUnavailableError",
]
