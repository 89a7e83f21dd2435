"""
Tests for the key-value media and record storage.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from naira_power.models.household import Family, User, UtilityLog
from naira_power.services.storage import (
    AUDIT_KEY,
    FAMILIES_KEY,
    LOGS_KEY,
    USERS_DB_KEY,
    DuplicateError,
    InMemoryMedium,
    JsonFileMedium,
    KeyValueAuditStorage,
    KeyValueFamilyStorage,
    KeyValueLogStorage,
    KeyValueSessionStorage,
    KeyValueUserStorage,
    RecordStore,
    StorageError,
)
from naira_power.models.audit import AuditEventBuilder
from tests.conftest import make_log, make_user


def _family(family_id="1", code="AB12CD", creator="ada@example.com", members=None):
    return Family(
        id=family_id,
        name="Test House",
        creator_id=creator,
        invite_code=code,
        member_ids=members or [creator],
    )


class TestInMemoryMedium:
    """Tests for the dictionary medium."""

    def test_get_set_delete(self):
        medium = InMemoryMedium()
        assert medium.get("k") is None
        medium.set("k", "v")
        assert medium.get("k") == "v"
        assert medium.keys() == ["k"]
        medium.delete("k")
        medium.delete("k")
        assert medium.get("k") is None


class TestJsonFileMedium:
    """Tests for the JSON file medium."""

    def test_missing_file_reads_empty(self, tmp_path):
        medium = JsonFileMedium(tmp_path / "store.json")
        assert medium.get("anything") is None
        assert medium.keys() == []

    def test_data_survives_reopening(self, tmp_path):
        """Test that a second medium on the same path sees the data."""
        path = tmp_path / "nested" / "store.json"
        JsonFileMedium(path).set("greeting", "hello")

        reopened = JsonFileMedium(path)
        assert reopened.get("greeting") == "hello"
        assert json.loads(path.read_text(encoding="utf-8")) == {"greeting": "hello"}

    def test_delete_removes_key(self, tmp_path):
        medium = JsonFileMedium(tmp_path / "store.json")
        medium.set("a", "1")
        medium.set("b", "2")
        medium.delete("a")
        assert sorted(medium.keys()) == ["b"]

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileMedium(path).get("x")

    def test_non_object_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileMedium(path).keys()

    def test_no_temp_files_left_behind(self, tmp_path):
        medium = JsonFileMedium(tmp_path / "store.json")
        medium.set("a", "1")
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]


class TestRecordStore:
    """Tests for typed list storage."""

    def test_missing_key_reads_empty(self, store):
        assert store.get_records(USERS_DB_KEY, User) == []

    def test_records_are_typed(self, store):
        store.set_records(USERS_DB_KEY, [make_user()])
        users = store.get_records(USERS_DB_KEY, User)
        assert isinstance(users[0], User)
        assert users[0].email == "ada@example.com"

    def test_invalid_stored_records_raise(self, medium, store):
        medium.set(USERS_DB_KEY, '[{"id": "x"}]')
        with pytest.raises(StorageError):
            store.get_records(USERS_DB_KEY, User)

    def test_empty_list_is_written(self, medium, store):
        store.set_records(LOGS_KEY, [])
        assert medium.get(LOGS_KEY) == "[]"


class TestUserStorage:
    """Tests for the users directory."""

    def test_lookup_by_email_is_case_insensitive(self, user_storage):
        user_storage.put_user(make_user("ada@example.com"))
        found = user_storage.get_user_by_email("  ADA@Example.COM ")
        assert found is not None
        assert found.id == "ada@example.com"

    def test_put_replaces_by_id(self, user_storage):
        user = user_storage.put_user(make_user())
        user_storage.put_user(user.model_copy(update={"name": "Ada O."}))
        users = user_storage.list_users()
        assert len(users) == 1
        assert users[0].name == "Ada O."

    def test_delete_user(self, user_storage):
        user_storage.put_user(make_user())
        assert user_storage.delete_user("ada@example.com") is True
        assert user_storage.delete_user("ada@example.com") is False


class TestFamilyStorage:
    """Tests for invariants enforced by the families directory."""

    def test_put_and_get(self, family_storage):
        family_storage.put_family(_family())
        assert family_storage.get_family("1").name == "Test House"
        assert family_storage.get_family_by_invite_code("AB12CD").id == "1"
        assert family_storage.get_family_by_name("Test House").id == "1"
        assert family_storage.get_family("2") is None

    def test_duplicate_invite_code_rejected(self, family_storage):
        family_storage.put_family(_family("1", "AB12CD"))
        with pytest.raises(DuplicateError):
            family_storage.put_family(_family("2", "AB12CD", creator="bola@example.com"))
        assert len(family_storage.list_families()) == 1

    def test_same_family_can_be_rewritten(self, family_storage):
        family = family_storage.put_family(_family("1", "AB12CD"))
        updated = family.model_copy(
            update={"member_ids": [*family.member_ids, "bola@example.com"]}
        )
        family_storage.put_family(updated)
        assert family_storage.get_family("1").member_ids == [
            "ada@example.com",
            "bola@example.com",
        ]

    def test_invalid_copy_is_refused(self, family_storage):
        """Test that mutated copies are re-validated before writing."""
        family = family_storage.put_family(_family())
        broken = family.model_copy(update={"member_ids": ["bola@example.com"]})
        with pytest.raises(StorageError):
            family_storage.put_family(broken)
        assert family_storage.get_family("1").member_ids == ["ada@example.com"]

    def test_delete_family(self, family_storage):
        family_storage.put_family(_family())
        assert family_storage.delete_family("1") is True
        assert family_storage.list_families() == []


class TestLogStorage:
    """Tests for the global log list."""

    def test_add_prepends(self, medium, log_storage):
        first = log_storage.add_log(make_log())
        second = log_storage.add_log(make_log())
        stored = json.loads(medium.get(LOGS_KEY))
        assert [item["id"] for item in stored] == [second.id, first.id]

    def test_list_is_newest_first_and_filtered(self, log_storage):
        now = datetime.now(timezone.utc)
        old = log_storage.add_log(make_log(created_at=now - timedelta(days=2)))
        new = log_storage.add_log(make_log(created_at=now))
        log_storage.add_log(make_log(family_id="fam-2", created_at=now + timedelta(days=1)))

        logs = log_storage.list_logs(family_id="fam-1")
        assert [log.id for log in logs] == [new.id, old.id]
        assert len(log_storage.list_logs()) == 3

    def test_duplicate_id_rejected(self, log_storage):
        log = log_storage.add_log(make_log())
        with pytest.raises(DuplicateError):
            log_storage.add_log(log)

    def test_delete_log(self, log_storage):
        log = log_storage.add_log(make_log())
        assert log_storage.delete_log(log.id) is True
        assert log_storage.delete_log(log.id) is False
        assert log_storage.get_log(log.id) is None

    def test_naive_and_aware_timestamps_sort_together(self, log_storage):
        aware = log_storage.add_log(make_log())
        naive = log_storage.add_log(make_log(created_at=datetime(2024, 1, 1)))

        logs = log_storage.list_logs("fam-1")

        assert [log.id for log in logs] == [aware.id, naive.id]
        assert logs[1].created_at.tzinfo is not None

    def test_dates_round_trip_through_json(self, log_storage):
        log = log_storage.add_log(make_log())
        stored = log_storage.get_log(log.id)
        assert stored == log
        assert isinstance(stored, UtilityLog)


class TestSessionStorage:
    """Tests for the session slot."""

    def test_only_the_id_is_stored(self, medium, session_storage):
        session_storage.set_user_id("ada@example.com")
        stored = json.loads(medium.get("naira_power_current_user"))
        assert stored["user_id"] == "ada@example.com"
        assert "name" not in stored

    def test_clear(self, session_storage):
        session_storage.set_user_id("ada@example.com")
        session_storage.clear()
        assert session_storage.get_user_id() is None

    def test_unexpected_value_reads_as_signed_out(self, medium, session_storage):
        medium.set("naira_power_current_user", '"just a string"')
        assert session_storage.get_user_id() is None


class TestAuditStorage:
    """Tests for the append-only audit trail."""

    def test_events_by_entity_and_recent(self, audit_storage):
        audit_storage.append_event(AuditEventBuilder.log_deleted("log-1", "fam-1", True))
        audit_storage.append_event(AuditEventBuilder.family_created("fam-1", "Home", "ada"))

        assert len(audit_storage.get_events_by_entity("log", "log-1")) == 1
        assert len(audit_storage.get_recent_events(limit=1)) == 1
        assert len(audit_storage.get_recent_events()) == 2

    def test_only_newest_events_are_kept(self, store):
        audit_storage = KeyValueAuditStorage(store, max_events=3)
        for n in range(5):
            audit_storage.append_event(
                AuditEventBuilder.log_deleted(f"log-{n}", "fam-1", True)
            )

        kept = json.loads(store.medium.get(AUDIT_KEY))
        assert [event["entity_id"] for event in kept] == ["log-2", "log-3", "log-4"]


class TestSharedStore:
    """Tests for several repositories sharing one medium."""

    def test_namespaces_do_not_clash(self, tmp_path):
        store = RecordStore(JsonFileMedium(tmp_path / "store.json"))
        KeyValueUserStorage(store).put_user(make_user())
        KeyValueFamilyStorage(store).put_family(_family())
        KeyValueLogStorage(store).add_log(make_log(family_id="1"))
        KeyValueSessionStorage(store).set_user_id("ada@example.com")

        reopened = RecordStore(JsonFileMedium(tmp_path / "store.json"))
        assert sorted(reopened.medium.keys()) == sorted([
            USERS_DB_KEY,
            FAMILIES_KEY,
            LOGS_KEY,
            "naira_power_current_user",
        ])
        assert len(KeyValueLogStorage(reopened).list_logs("1")) == 1
