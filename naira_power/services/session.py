"""
Session Holder

Remembers who is signed in across restarts.

DESIGN DECISION: The session stores only the user's id. The user itself is
always read back from the users directory, so a name or family change made
anywhere is visible through the session immediately.
"""

from typing import Optional

from naira_power.audit import AuditLogger
from naira_power.models.household import User
from naira_power.services.storage import (
    SessionStorageInterface,
    UserStorageInterface,
)


SESSION_MISMATCH_MESSAGE = "Unable to find your account session. Please sign in again."


class SessionMismatchError(Exception):
    """The acting user is not the signed-in user (or nobody is signed in)."""

    def __init__(self, message: str = SESSION_MISMATCH_MESSAGE):
        super().__init__(message)
        self.message = message


class SessionHolder:
    """Single "current user" slot backed by session storage."""

    def __init__(
        self,
        storage: SessionStorageInterface,
        users: UserStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._users = users
        self._audit_logger = audit_logger

    def save_session(self, user: User) -> None:
        self._storage.set_user_id(user.id)

        if self._audit_logger:
            self._audit_logger.log_session_started(user.id)

    def get_session(self) -> Optional[User]:
        """
        The signed-in user, resolved through the users directory.

        A session whose user no longer exists reads as signed out.
        """
        user_id = self._storage.get_user_id()
        if user_id is None:
            return None
        return self._users.get_user(user_id)

    def clear_session(self) -> None:
        user_id = self._storage.get_user_id()
        self._storage.clear()

        if self._audit_logger:
            self._audit_logger.log_session_cleared(user_id)

    def require_user(self, user_id: str) -> User:
        """
        Return the signed-in user, checking it is ``user_id``.

        Raises:
            SessionMismatchError: If nobody is signed in or someone else is
        """
        current = self.get_session()
        if current is None or current.id != user_id:
            if self._audit_logger:
                self._audit_logger.log_session_mismatch(
                    user_id,
                    current.id if current else None,
                )
            raise SessionMismatchError()
        return current
