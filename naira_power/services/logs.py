"""
Log Service

Records, lists and deletes a family's electricity recharges.

Every operation that changes the record set answers with the family's
refreshed view (newest first), which is what a caller displays next.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from naira_power.audit import AuditLogger
from naira_power.models.household import User, UtilityLog
from naira_power.services.storage import LogStorageInterface


class LogService:
    """
    Family-scoped access to utility logs.

    NOTE: Nothing here checks that the caller belongs to the family.
    Callers that need that guarantee (see HouseholdApp) check it first.
    """

    def __init__(
        self,
        storage: LogStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger

    def get_logs(self, family_id: str) -> list[UtilityLog]:
        """The family's logs, newest first."""
        return self._storage.list_logs(family_id=family_id)

    def get_log(self, log_id: str) -> Optional[UtilityLog]:
        return self._storage.get_log(log_id)

    def add_log(self, log: UtilityLog) -> list[UtilityLog]:
        """Store a new log and return its family's refreshed view."""
        self._storage.add_log(log)

        if self._audit_logger:
            self._audit_logger.log_log_added(
                log.id, log.family_id, log.user_id, str(log.amount)
            )

        return self.get_logs(log.family_id)

    def delete_log(self, log_id: str, family_id: str) -> list[UtilityLog]:
        """
        Remove the log with ``log_id`` and return ``family_id``'s view.

        Deleting an unknown id changes nothing.
        """
        found = self._storage.delete_log(log_id)

        if self._audit_logger:
            self._audit_logger.log_log_deleted(log_id, family_id, found)

        return self.get_logs(family_id)

    @staticmethod
    def new_log(
        family_id: str,
        user: User,
        date: date,
        units: float,
        amount: Union[Decimal, float, str],
        previous_reading: float,
    ) -> UtilityLog:
        """Build a log recorded by ``user`` now."""
        return UtilityLog(
            family_id=family_id,
            user_id=user.id,
            user_name=user.name,
            date=date,
            units=units,
            amount=Decimal(str(amount)),
            previous_reading=previous_reading,
        )
