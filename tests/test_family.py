"""
Tests for the family service.
"""

import re

import pytest

from naira_power.services.family import (
    FamilyService,
    generate_invite_code,
    normalize_invite_code,
)
from naira_power.services.storage import DuplicateError


class TestInviteCodes:
    """Tests for invite code helpers."""

    def test_generated_code_shape(self):
        for _ in range(50):
            assert re.fullmatch(r"[A-Z0-9]{6}", generate_invite_code())

    def test_generated_code_length_is_configurable(self):
        assert len(generate_invite_code(8)) == 8

    def test_normalize(self):
        assert normalize_invite_code("  ab12cd \n") == "AB12CD"


class TestCreateFamily:
    """Tests for FamilyService.create_family."""

    def test_creator_is_sole_member(self, identity, family_service):
        ada = identity.get_or_register_user("ada@example.com")
        family = family_service.create_family("Test House", ada)

        assert family.creator_id == ada.id
        assert family.member_ids == [ada.id]
        assert re.fullmatch(r"[A-Z0-9]{6}", family.invite_code)
        assert family.id.isdigit()

    def test_creator_points_at_new_family(self, identity, family_service):
        ada = identity.get_or_register_user("ada@example.com")
        family = family_service.create_family("Test House", ada)
        assert identity.get_user(ada.id).family_id == family.id

    def test_family_is_persisted(self, identity, family_service, family_storage):
        ada = identity.get_or_register_user("ada@example.com")
        family = family_service.create_family("Test House", ada)
        assert family_storage.get_family(family.id) == family

    def test_ids_do_not_collide(self, identity, family_service):
        ada = identity.get_or_register_user("ada@example.com")
        bola = identity.get_or_register_user("bola@example.com")
        first = family_service.create_family("One", ada)
        second = family_service.create_family("Two", bola)
        assert first.id != second.id
        assert first.invite_code != second.invite_code

    def test_collision_draws_a_new_code(
        self, identity, family_service, audit_storage, monkeypatch
    ):
        ada = identity.get_or_register_user("ada@example.com")
        bola = identity.get_or_register_user("bola@example.com")

        codes = iter(["AAAAAA", "AAAAAA", "BBBBBB"])
        monkeypatch.setattr(
            "naira_power.services.family.generate_invite_code",
            lambda length=6: next(codes),
        )

        first = family_service.create_family("One", ada)
        second = family_service.create_family("Two", bola)

        assert first.invite_code == "AAAAAA"
        assert second.invite_code == "BBBBBB"
        collisions = [
            e for e in audit_storage.get_recent_events()
            if e.event_type.value == "invite_code_collision"
        ]
        assert len(collisions) == 1

    def test_gives_up_after_configured_attempts(
        self, identity, family_storage, user_storage, monkeypatch
    ):
        service = FamilyService(
            families=family_storage,
            users=user_storage,
            invite_code_attempts=3,
        )
        ada = identity.get_or_register_user("ada@example.com")
        bola = identity.get_or_register_user("bola@example.com")

        monkeypatch.setattr(
            "naira_power.services.family.generate_invite_code",
            lambda length=6: "SAMESS",
        )
        service.create_family("One", ada)

        with pytest.raises(DuplicateError):
            service.create_family("Two", bola)
        assert identity.get_user(bola.id).family_id is None


class TestJoinFamily:
    """Tests for FamilyService.join_family."""

    def test_join_with_valid_code(self, identity, family_service, family_storage):
        ada = identity.get_or_register_user("ada@example.com")
        bola = identity.get_or_register_user("bola@example.com")
        family = family_service.create_family("Test House", ada)

        joined = family_service.join_family(family.invite_code, bola)

        assert joined.id == family.id
        assert identity.get_user(bola.id).family_id == family.id
        stored = family_storage.get_family(family.id)
        assert stored.member_ids == [ada.id, bola.id]

    def test_code_is_normalized(self, identity, family_service):
        ada = identity.get_or_register_user("ada@example.com")
        bola = identity.get_or_register_user("bola@example.com")
        family = family_service.create_family("Test House", ada)

        joined = family_service.join_family(f"  {family.invite_code.lower()} ", bola)
        assert joined is not None

    def test_unknown_code_has_no_side_effects(
        self, identity, family_service, family_storage, user_storage
    ):
        ada = identity.get_or_register_user("ada@example.com")
        bola = identity.get_or_register_user("bola@example.com")
        family_service.create_family("Test House", ada)

        families_before = family_storage.list_families()
        users_before = user_storage.list_users()

        assert family_service.join_family("NOPE99", bola) is None
        assert family_service.join_family("   ", bola) is None

        assert family_storage.list_families() == families_before
        assert user_storage.list_users() == users_before

    def test_repeat_join_adds_no_duplicate(self, identity, family_service):
        ada = identity.get_or_register_user("ada@example.com")
        bola = identity.get_or_register_user("bola@example.com")
        family = family_service.create_family("Test House", ada)

        family_service.join_family(family.invite_code, bola)
        again = family_service.join_family(family.invite_code, bola)

        assert again.member_ids.count(bola.id) == 1
        assert again.member_ids.count(ada.id) == 1

    def test_creator_rejoining_is_harmless(self, identity, family_service):
        ada = identity.get_or_register_user("ada@example.com")
        family = family_service.create_family("Test House", ada)
        joined = family_service.join_family(family.invite_code, ada)
        assert joined.member_ids == [ada.id]

    def test_demo_household_joinable_by_code(self, identity, family_service):
        identity.get_or_register_user("demo@gmail.com")
        bola = identity.get_or_register_user("bola@example.com")
        family = family_service.join_family("demo123", bola)
        assert family is not None
        assert family.name == "Demo Household"

    def test_get_members(self, identity, family_service):
        ada = identity.get_or_register_user("ada@example.com")
        bola = identity.get_or_register_user("bola@example.com")
        family = family_service.create_family("Test House", ada)
        family = family_service.join_family(family.invite_code, bola)

        members = family_service.get_members(family)
        assert [m.id for m in members] == [ada.id, bola.id]


class TestTestHouseScenario:
    """End-to-end create-then-join scenario."""

    def test_create_and_join(self, identity, family_service):
        a = identity.get_or_register_user("a@example.com")
        b = identity.get_or_register_user("b@example.com")

        family = family_service.create_family("Test House", a)
        assert re.fullmatch(r"[A-Z0-9]{6}", family.invite_code)

        family_service.join_family(family.invite_code, b)

        stored = family_service.get_family(family.id)
        assert identity.get_user(b.id).family_id == family.id
        assert stored.member_ids.count(a.id) == 1
        assert stored.member_ids.count(b.id) == 1
