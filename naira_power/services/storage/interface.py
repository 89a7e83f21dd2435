"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface per entity type.
Business services only ever talk to these interfaces, which lets us:
1. Back the record set with any key-value medium (memory, JSON file, ...)
2. Use in-memory storage for testing
3. Enforce invariants (invite code uniqueness, family membership)
   at one boundary instead of at every call site

The interface is intentionally simple - we're not building a full ORM.
Just get/list/put/delete for each kind of record.
"""

from abc import ABC, abstractmethod
from typing import Optional

from naira_power.models.audit import AuditEvent
from naira_power.models.household import Family, User, UtilityLog


class UserStorageInterface(ABC):
    """Abstract interface for the users directory."""

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        """Retrieve a user by id, or None."""
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve a user by email address.

        Matching is case-insensitive.
        """
        pass

    @abstractmethod
    def list_users(self) -> list[User]:
        """List every stored user."""
        pass

    @abstractmethod
    def put_user(self, user: User) -> User:
        """
        Insert or replace a user (matched by id).

        Returns:
            The stored user
        """
        pass

    @abstractmethod
    def delete_user(self, user_id: str) -> bool:
        """Delete a user. Returns True if a record was removed."""
        pass


class FamilyStorageInterface(ABC):
    """
    Abstract interface for the families directory.

    Implementations MUST:
    - re-validate a family before writing it (creator is a member,
      members are unique)
    - refuse to store two families sharing one invite code
    """

    @abstractmethod
    def get_family(self, family_id: str) -> Optional[Family]:
        """Retrieve a family by id, or None."""
        pass

    @abstractmethod
    def get_family_by_invite_code(self, invite_code: str) -> Optional[Family]:
        """Retrieve the family holding an (already normalized) invite code."""
        pass

    @abstractmethod
    def get_family_by_name(self, name: str) -> Optional[Family]:
        """Retrieve the first family with exactly this name."""
        pass

    @abstractmethod
    def list_families(self) -> list[Family]:
        """List every stored family."""
        pass

    @abstractmethod
    def put_family(self, family: Family) -> Family:
        """
        Insert or replace a family (matched by id).

        Returns:
            The stored family

        Raises:
            DuplicateError: If another family already uses the invite code
            StorageError: If the family breaks a membership invariant
        """
        pass

    @abstractmethod
    def delete_family(self, family_id: str) -> bool:
        """Delete a family. Returns True if a record was removed."""
        pass


class LogStorageInterface(ABC):
    """
    Abstract interface for utility log storage.

    Logs are never updated in place - only added or deleted.
    """

    @abstractmethod
    def get_log(self, log_id: str) -> Optional[UtilityLog]:
        """Retrieve a log by id, or None."""
        pass

    @abstractmethod
    def list_logs(self, family_id: Optional[str] = None) -> list[UtilityLog]:
        """
        List logs, newest first by creation time.

        Args:
            family_id: Only return logs belonging to this family
        """
        pass

    @abstractmethod
    def add_log(self, log: UtilityLog) -> UtilityLog:
        """
        Prepend a log to the record set.

        Raises:
            DuplicateError: If a log with the same id exists
        """
        pass

    @abstractmethod
    def delete_log(self, log_id: str) -> bool:
        """Delete a log by id. Returns True if a record was removed."""
        pass


class SessionStorageInterface(ABC):
    """
    Abstract interface for the "who is signed in" slot.

    Only the user id is stored; the user itself always comes from
    the users directory.
    """

    @abstractmethod
    def get_user_id(self) -> Optional[str]:
        """Id of the signed-in user, or None."""
        pass

    @abstractmethod
    def set_user_id(self, user_id: str) -> None:
        """Remember the signed-in user."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Forget the signed-in user."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """Get all events for one entity, in chronological order."""
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get the most recent audit events (newest first)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
