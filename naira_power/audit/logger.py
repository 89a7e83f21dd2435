"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of membership changes and deletions
2. Debugging capability
3. A history the household can look back on

The audit logger:
- Always logs locally through structlog
- Persists to audit storage when one is configured
- Never raises if persisting fails
"""

from typing import Optional

import structlog

from naira_power.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from naira_power.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def get_logger(name: Optional[str] = None):
    """Get a structlog logger configured for this package."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), if provided
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = get_logger("naira_power.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_user_registered(self, user_id: str, family_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.user_registered(user_id, family_id))

    def log_user_updated(self, user_id: str, family_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.user_updated(user_id, family_id))

    def log_demo_household_seeded(self, family_id: str, log_count: int) -> None:
        self.log(AuditEventBuilder.demo_household_seeded(family_id, log_count))

    def log_family_created(self, family_id: str, name: str, creator_id: str) -> None:
        self.log(AuditEventBuilder.family_created(family_id, name, creator_id))

    def log_family_joined(
        self,
        family_id: str,
        user_id: str,
        already_member: bool,
    ) -> None:
        self.log(AuditEventBuilder.family_joined(family_id, user_id, already_member))

    def log_invite_code_rejected(self, invite_code: str, user_id: str) -> None:
        self.log(AuditEventBuilder.invite_code_rejected(invite_code, user_id))

    def log_invite_code_collision(self, invite_code: str, attempt: int) -> None:
        self.log(AuditEventBuilder.invite_code_collision(invite_code, attempt))

    def log_session_started(self, user_id: str) -> None:
        self.log(AuditEventBuilder.session_started(user_id))

    def log_session_cleared(self, user_id: Optional[str]) -> None:
        self.log(AuditEventBuilder.session_cleared(user_id))

    def log_session_mismatch(
        self,
        expected_user_id: str,
        session_user_id: Optional[str],
    ) -> None:
        self.log(AuditEventBuilder.session_mismatch(expected_user_id, session_user_id))

    def log_log_added(
        self,
        log_id: str,
        family_id: str,
        user_id: str,
        amount: str,
    ) -> None:
        self.log(AuditEventBuilder.log_added(log_id, family_id, user_id, amount))

    def log_log_deleted(self, log_id: str, family_id: str, found: bool) -> None:
        self.log(AuditEventBuilder.log_deleted(log_id, family_id, found))

    def log_insight_generated(self, family_id: Optional[str], log_count: int) -> None:
        self.log(AuditEventBuilder.insight_generated(family_id, log_count))

    def log_insight_fallback(self, family_id: Optional[str], error_message: str) -> None:
        self.log(AuditEventBuilder.insight_fallback(family_id, error_message))
