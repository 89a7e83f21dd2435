"""
Key-Value Record Storage

DESIGN DECISION: Each entity type lives as one JSON list under its own key
in a KeyValueMedium. The whole list is read, changed and written back on
every operation.

TRADEOFFS:
- Not suitable for large data sets (we're fine for a household)
- No transactions: a failed write leaves the previous list in place
- Filtering and sorting happen in Python

The implementation follows the abstract interfaces, so a different
medium (or a real database) can be swapped in without touching services.
"""

import json
from functools import lru_cache
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from naira_power.models.audit import AuditEvent
from naira_power.models.household import Family, User, UtilityLog, utc_now
from naira_power.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    FamilyStorageInterface,
    LogStorageInterface,
    SessionStorageInterface,
    StorageError,
    UserStorageInterface,
)
from naira_power.services.storage.medium import KeyValueMedium


# Logical namespaces within the medium
LOGS_KEY = "naira_power_logs_v2"
CURRENT_USER_KEY = "naira_power_current_user"
USERS_DB_KEY = "naira_power_users_db"
FAMILIES_KEY = "naira_power_families"
AUDIT_KEY = "naira_power_audit"

DEFAULT_AUDIT_MAX_EVENTS = 500

RecordT = TypeVar("RecordT", bound=BaseModel)


@lru_cache(maxsize=None)
def _list_adapter(model: type[BaseModel]) -> TypeAdapter:
    return TypeAdapter(list[model])


class RecordStore:
    """
    Generic get/set of typed lists against a key-value medium.

    Values are validated on the way in and out, so a record that breaks
    its model's rules is never written and never handed back.
    """

    def __init__(self, medium: KeyValueMedium):
        self._medium = medium

    @property
    def medium(self) -> KeyValueMedium:
        return self._medium

    def get_records(self, key: str, model: type[RecordT]) -> list[RecordT]:
        """Read the list stored under ``key``. A missing key reads as empty."""
        raw = self._medium.get(key)
        if raw is None:
            return []
        try:
            return _list_adapter(model).validate_json(raw)
        except ValidationError as e:
            raise StorageError(
                f"Stored {model.__name__} records under '{key}' are invalid: {e}"
            )

    def set_records(self, key: str, records: list[RecordT]) -> None:
        """Replace the list stored under ``key``."""
        if not records:
            self._medium.set(key, "[]")
            return
        model = type(records[0])
        payload = _list_adapter(model).dump_json(records)
        self._medium.set(key, payload.decode("utf-8"))

    def get_value(self, key: str) -> Optional[Any]:
        """Read a single JSON value (not a record list)."""
        raw = self._medium.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Stored value under '{key}' is not JSON: {e}")

    def set_value(self, key: str, value: Any) -> None:
        self._medium.set(key, json.dumps(value))

    def delete(self, key: str) -> None:
        self._medium.delete(key)


class KeyValueUserStorage(UserStorageInterface):
    """Users directory kept as a JSON list."""

    def __init__(self, store: RecordStore, key: str = USERS_DB_KEY):
        self._store = store
        self._key = key

    def get_user(self, user_id: str) -> Optional[User]:
        for user in self.list_users():
            if user.id == user_id:
                return user
        return None

    def get_user_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        for user in self.list_users():
            if user.email.lower() == wanted:
                return user
        return None

    def list_users(self) -> list[User]:
        return self._store.get_records(self._key, User)

    def put_user(self, user: User) -> User:
        user = User.model_validate(user.model_dump())
        users = self.list_users()
        for idx, existing in enumerate(users):
            if existing.id == user.id:
                users[idx] = user
                break
        else:
            users.append(user)
        self._store.set_records(self._key, users)
        return user

    def delete_user(self, user_id: str) -> bool:
        users = self.list_users()
        remaining = [u for u in users if u.id != user_id]
        if len(remaining) == len(users):
            return False
        self._store.set_records(self._key, remaining)
        return True


class KeyValueFamilyStorage(FamilyStorageInterface):
    """
    Families directory kept as a JSON list.

    Invariants are enforced here on every write.
    """

    def __init__(self, store: RecordStore, key: str = FAMILIES_KEY):
        self._store = store
        self._key = key

    def get_family(self, family_id: str) -> Optional[Family]:
        for family in self.list_families():
            if family.id == family_id:
                return family
        return None

    def get_family_by_invite_code(self, invite_code: str) -> Optional[Family]:
        for family in self.list_families():
            if family.invite_code == invite_code:
                return family
        return None

    def get_family_by_name(self, name: str) -> Optional[Family]:
        for family in self.list_families():
            if family.name == name:
                return family
        return None

    def list_families(self) -> list[Family]:
        return self._store.get_records(self._key, Family)

    def put_family(self, family: Family) -> Family:
        # Mutated copies skip validation, so re-check before writing
        try:
            family = Family.model_validate(family.model_dump())
        except ValidationError as e:
            raise StorageError(f"Family {family.id} is invalid: {e}")

        families = self.list_families()
        for other in families:
            if other.id != family.id and other.invite_code == family.invite_code:
                raise DuplicateError(
                    f"Invite code {family.invite_code} is already in use"
                )

        for idx, existing in enumerate(families):
            if existing.id == family.id:
                families[idx] = family
                break
        else:
            families.append(family)
        self._store.set_records(self._key, families)
        return family

    def delete_family(self, family_id: str) -> bool:
        families = self.list_families()
        remaining = [f for f in families if f.id != family_id]
        if len(remaining) == len(families):
            return False
        self._store.set_records(self._key, remaining)
        return True


class KeyValueLogStorage(LogStorageInterface):
    """
    Utility logs kept as one global JSON list, newest additions first.
    """

    def __init__(self, store: RecordStore, key: str = LOGS_KEY):
        self._store = store
        self._key = key

    def _all_logs(self) -> list[UtilityLog]:
        return self._store.get_records(self._key, UtilityLog)

    def get_log(self, log_id: str) -> Optional[UtilityLog]:
        for log in self._all_logs():
            if log.id == log_id:
                return log
        return None

    def list_logs(self, family_id: Optional[str] = None) -> list[UtilityLog]:
        logs = self._all_logs()
        if family_id is not None:
            logs = [log for log in logs if log.family_id == family_id]

        # Stable sort: equal timestamps keep storage order (newest added first)
        logs.sort(key=lambda log: log.created_at, reverse=True)
        return logs

    def add_log(self, log: UtilityLog) -> UtilityLog:
        logs = self._all_logs()
        if any(existing.id == log.id for existing in logs):
            raise DuplicateError(f"Log already exists: {log.id}")
        self._store.set_records(self._key, [log, *logs])
        return log

    def delete_log(self, log_id: str) -> bool:
        logs = self._all_logs()
        remaining = [log for log in logs if log.id != log_id]
        if len(remaining) == len(logs):
            return False
        self._store.set_records(self._key, remaining)
        return True


class KeyValueSessionStorage(SessionStorageInterface):
    """Session slot holding ``{"user_id": ..., "started_at": ...}``."""

    def __init__(self, store: RecordStore, key: str = CURRENT_USER_KEY):
        self._store = store
        self._key = key

    def get_user_id(self) -> Optional[str]:
        value = self._store.get_value(self._key)
        if not isinstance(value, dict):
            return None
        user_id = value.get("user_id")
        return user_id if isinstance(user_id, str) and user_id else None

    def set_user_id(self, user_id: str) -> None:
        self._store.set_value(
            self._key,
            {"user_id": user_id, "started_at": utc_now().isoformat()},
        )

    def clear(self) -> None:
        self._store.delete(self._key)


class KeyValueAuditStorage(AuditStorageInterface):
    """
    Append-only audit trail kept as a JSON list.

    Only the newest ``max_events`` entries are kept; older ones are dropped
    on append.
    """

    def __init__(
        self,
        store: RecordStore,
        key: str = AUDIT_KEY,
        max_events: int = DEFAULT_AUDIT_MAX_EVENTS,
    ):
        self._store = store
        self._key = key
        self._max_events = max_events

    def _all_events(self) -> list[AuditEvent]:
        return self._store.get_records(self._key, AuditEvent)

    def append_event(self, event: AuditEvent) -> bool:
        events = self._all_events()
        events.append(event)
        self._store.set_records(self._key, events[-self._max_events:])
        return True

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._all_events()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = self._all_events()
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
