"""
Storage Services Package

Provides abstract interfaces and key-value implementations for the record set.
Records live in a KeyValueMedium (in memory or a JSON file), which can be
swapped without touching the services built on top.
"""

from naira_power.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    FamilyStorageInterface,
    LogStorageInterface,
    NotFoundError,
    SessionStorageInterface,
    StorageError,
    UserStorageInterface,
)
from naira_power.services.storage.medium import (
    InMemoryMedium,
    JsonFileMedium,
    KeyValueMedium,
)
from naira_power.services.storage.records import (
    AUDIT_KEY,
    DEFAULT_AUDIT_MAX_EVENTS,
    CURRENT_USER_KEY,
    FAMILIES_KEY,
    LOGS_KEY,
    USERS_DB_KEY,
    KeyValueAuditStorage,
    KeyValueFamilyStorage,
    KeyValueLogStorage,
    KeyValueSessionStorage,
    KeyValueUserStorage,
    RecordStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "FamilyStorageInterface",
    "LogStorageInterface",
    "SessionStorageInterface",
    "UserStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Media
    "InMemoryMedium",
    "JsonFileMedium",
    "KeyValueMedium",
    # Key-value implementation
    "AUDIT_KEY",
    "DEFAULT_AUDIT_MAX_EVENTS",
    "CURRENT_USER_KEY",
    "FAMILIES_KEY",
    "LOGS_KEY",
    "USERS_DB_KEY",
    "KeyValueAuditStorage",
    "KeyValueFamilyStorage",
    "KeyValueLogStorage",
    "KeyValueSessionStorage",
    "KeyValueUserStorage",
    "RecordStore",
]
