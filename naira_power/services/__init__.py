"""Services package."""

from naira_power.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    FamilyStorageInterface,
    InMemoryMedium,
    JsonFileMedium,
    KeyValueMedium,
    LogStorageInterface,
    NotFoundError,
    RecordStore,
    SessionStorageInterface,
    StorageError,
    UserStorageInterface,
)

__all__ = [
    "AuditStorageInterface",
    "DuplicateError",
    "FamilyStorageInterface",
    "InMemoryMedium",
    "JsonFileMedium",
    "KeyValueMedium",
    "LogStorageInterface",
    "NotFoundError",
    "RecordStore",
    "SessionStorageInterface",
    "StorageError",
    "UserStorageInterface",
]
