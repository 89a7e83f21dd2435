"""
Family Service

Creates families and admits members by invite code.

DESIGN DECISION: Invite codes are unique across families. The storage layer
refuses a duplicate code, and creation simply draws a fresh code and tries
again (a bounded number of times) when that happens.
"""

import secrets
import string
import time
from typing import Optional

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt

from naira_power.audit import AuditLogger
from naira_power.models.household import Family, User, utc_now
from naira_power.services.storage import (
    DuplicateError,
    FamilyStorageInterface,
    UserStorageInterface,
)


INVITE_CODE_ALPHABET = string.digits + string.ascii_uppercase  # base-36


def generate_invite_code(length: int = 6) -> str:
    """Random uppercase base-36 code."""
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


def normalize_invite_code(invite_code: str) -> str:
    """Codes are matched trimmed and uppercased."""
    return invite_code.strip().upper()


class FamilyService:
    """
    Manages families and their membership.

    RESPONSIBILITIES:
    - Create a family with its creator as the only member
    - Let users join by invite code (idempotently)
    - Keep each member's ``family_id`` pointing at the family they joined
    """

    def __init__(
        self,
        families: FamilyStorageInterface,
        users: UserStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        invite_code_length: int = 6,
        invite_code_attempts: int = 5,
    ):
        self._families = families
        self._users = users
        self._audit_logger = audit_logger
        self._invite_code_length = invite_code_length
        self._invite_code_attempts = invite_code_attempts

    def _allocate_id(self) -> str:
        """Creation time in epoch milliseconds, bumped past any id in use."""
        candidate = time.time_ns() // 1_000_000
        while self._families.get_family(str(candidate)) is not None:
            candidate += 1
        return str(candidate)

    def create_family(self, name: str, creator: User) -> Family:
        """
        Create a family owned by ``creator`` and move the creator into it.

        Raises:
            DuplicateError: If every generated invite code was already taken
        """
        family_id = self._allocate_id()
        created_at = utc_now()

        for attempt in Retrying(
            retry=retry_if_exception_type(DuplicateError),
            stop=stop_after_attempt(self._invite_code_attempts),
            reraise=True,
        ):
            with attempt:
                invite_code = generate_invite_code(self._invite_code_length)
                try:
                    family = self._families.put_family(
                        Family(
                            id=family_id,
                            name=name,
                            creator_id=creator.id,
                            invite_code=invite_code,
                            member_ids=[creator.id],
                            created_at=created_at,
                        )
                    )
                except DuplicateError:
                    if self._audit_logger:
                        self._audit_logger.log_invite_code_collision(
                            invite_code,
                            attempt.retry_state.attempt_number,
                        )
                    raise

        self._users.put_user(creator.model_copy(update={"family_id": family.id}))

        if self._audit_logger:
            self._audit_logger.log_family_created(family.id, family.name, creator.id)

        return family

    def join_family(self, invite_code: str, user: User) -> Optional[Family]:
        """
        Add ``user`` to the family holding ``invite_code``.

        Returns None (and changes nothing) when no family has the code.
        Joining twice is harmless: the member list never gains a duplicate,
        and the user's ``family_id`` is set either way.
        """
        code = normalize_invite_code(invite_code)
        family = self._families.get_family_by_invite_code(code) if code else None

        if family is None:
            if self._audit_logger:
                self._audit_logger.log_invite_code_rejected(code, user.id)
            return None

        already_member = family.has_member(user.id)
        if not already_member:
            family = self._families.put_family(
                family.model_copy(update={"member_ids": [*family.member_ids, user.id]})
            )

        self._users.put_user(user.model_copy(update={"family_id": family.id}))

        if self._audit_logger:
            self._audit_logger.log_family_joined(family.id, user.id, already_member)

        return family

    def get_family(self, family_id: str) -> Optional[Family]:
        return self._families.get_family(family_id)

    def get_members(self, family: Family) -> list[User]:
        """Member records in join order; ids with no user record are skipped."""
        by_id = {user.id: user for user in self._users.list_users()}
        return [by_id[m] for m in family.member_ids if m in by_id]
