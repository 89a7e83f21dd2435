"""
Identity Service

Resolves an email address to a User, registering the user on first sight.

There is no password and no verification: whoever types an email is
trusted to be that person. The only special case is the demo account,
which arrives with a ready-made household so the app has something
to show.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional
from urllib.parse import urlencode

from naira_power.audit import AuditLogger
from naira_power.models.household import Family, User, UtilityLog
from naira_power.services.storage import (
    FamilyStorageInterface,
    LogStorageInterface,
    NotFoundError,
    UserStorageInterface,
)


AVATAR_BASE_URL = "https://ui-avatars.com/api/"

DEFAULT_DEMO_EMAIL = "demo@gmail.com"
DEMO_FAMILY_ID = "demo-family-id"
DEMO_FAMILY_NAME = "Demo Household"
DEMO_INVITE_CODE = "DEMO123"


def derive_display_name(email: str, name: Optional[str] = None) -> str:
    """
    Pick a display name for a new user.

    A non-blank ``name`` wins. Otherwise the local part of the email is used
    with its first letter capitalized ("ada.obi@x.com" -> "Ada.obi").
    """
    if name and name.strip():
        return name.strip()

    local_part = email.strip().split("@")[0]
    display = local_part[:1].upper() + local_part[1:]
    return display or email.strip()


def avatar_url_for(name: str) -> str:
    """Generated-initials avatar for a display name."""
    query = urlencode({
        "name": name,
        "background": "random",
        "color": "fff",
        "bold": "true",
    })
    return f"{AVATAR_BASE_URL}?{query}"


def demo_seed_logs(family_id: str = DEMO_FAMILY_ID) -> list[UtilityLog]:
    """The two sample recharges every demo household starts with."""
    return [
        UtilityLog(
            id="demo-log-1",
            family_id=family_id,
            user_id=DEFAULT_DEMO_EMAIL,
            user_name="Dad",
            date=date(2023, 10, 1),
            units=150,
            amount=Decimal("15000"),
            previous_reading=12400,
            created_at=datetime(2023, 10, 1, tzinfo=timezone.utc),
        ),
        UtilityLog(
            id="demo-log-2",
            family_id=family_id,
            user_id="mom@gmail.com",
            user_name="Mom",
            date=date(2023, 10, 15),
            units=120,
            amount=Decimal("12000"),
            previous_reading=12550,
            created_at=datetime(2023, 10, 15, tzinfo=timezone.utc),
        ),
    ]


class IdentityService:
    """
    Looks users up by email and registers newcomers.

    RESPONSIBILITIES:
    - Case-insensitive lookup by email
    - Registration with a derived display name and avatar
    - Provisioning the demo household for the demo account
    - Plain user updates and member listing
    """

    def __init__(
        self,
        users: UserStorageInterface,
        families: FamilyStorageInterface,
        logs: LogStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        demo_email: str = DEFAULT_DEMO_EMAIL,
    ):
        self._users = users
        self._families = families
        self._logs = logs
        self._audit_logger = audit_logger
        self._demo_email = demo_email.strip().lower()

    def get_or_register_user(self, email: str, name: Optional[str] = None) -> User:
        """
        Return the user for ``email``, registering them if needed.

        A returning user comes back unchanged; ``name`` only applies to
        new registrations.

        Raises:
            ValueError: If email is blank
        """
        if not email or not email.strip():
            raise ValueError("Email is required")

        existing = self._users.get_user_by_email(email)
        if existing:
            return existing

        normalized = email.strip().lower()
        display_name = derive_display_name(email, name)

        user = User(
            id=normalized,
            email=normalized,
            name=display_name,
            avatar=avatar_url_for(display_name),
            family_id=None,
        )

        if normalized == self._demo_email:
            demo_family = self._provision_demo_household(user)
            user = user.model_copy(update={"family_id": demo_family.id})

        user = self._users.put_user(user)

        if self._audit_logger:
            self._audit_logger.log_user_registered(user.id, user.family_id)

        return user

    def _provision_demo_household(self, user: User) -> Family:
        """
        Find or create the demo household and make ``user`` a member.

        Idempotent: the household is looked up by name, and the sample
        logs are only written when the household is first created.
        """
        family = self._families.get_family_by_name(DEMO_FAMILY_NAME)

        if family is None:
            family = self._families.put_family(
                Family(
                    id=DEMO_FAMILY_ID,
                    name=DEMO_FAMILY_NAME,
                    creator_id=user.id,
                    invite_code=DEMO_INVITE_CODE,
                    member_ids=[user.id],
                )
            )

            seeded = 0
            for log in demo_seed_logs(family.id):
                if self._logs.get_log(log.id) is None:
                    self._logs.add_log(log)
                    seeded += 1

            if self._audit_logger:
                self._audit_logger.log_demo_household_seeded(family.id, seeded)

        elif not family.has_member(user.id):
            family = self._families.put_family(
                family.model_copy(update={"member_ids": [*family.member_ids, user.id]})
            )

        return family

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get_user(user_id)

    def get_users(self, user_ids: list[str]) -> list[User]:
        """Users for the given ids, in the same order. Unknown ids are skipped."""
        by_id = {user.id: user for user in self._users.list_users()}
        return [by_id[user_id] for user_id in user_ids if user_id in by_id]

    def update_user(self, user: User) -> User:
        """
        Persist changes to an existing user.

        Raises:
            NotFoundError: If the user was never registered
        """
        if self._users.get_user(user.id) is None:
            raise NotFoundError(f"User not found: {user.id}")

        user = self._users.put_user(user)

        if self._audit_logger:
            self._audit_logger.log_user_updated(user.id, user.family_id)

        return user
