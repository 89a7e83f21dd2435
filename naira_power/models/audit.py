"""
Audit Models for Naira Power

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of who joined which family and when
2. Debugging information when things go wrong
3. A record of deleted logs, since deletion is permanent

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from naira_power.models.household import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Identity
    USER_REGISTERED = "user_registered"
    USER_UPDATED = "user_updated"
    DEMO_HOUSEHOLD_SEEDED = "demo_household_seeded"

    # Families
    FAMILY_CREATED = "family_created"
    FAMILY_JOINED = "family_joined"
    INVITE_CODE_REJECTED = "invite_code_rejected"
    INVITE_CODE_COLLISION = "invite_code_collision"

    # Sessions
    SESSION_STARTED = "session_started"
    SESSION_CLEARED = "session_cleared"
    SESSION_MISMATCH = "session_mismatch"

    # Logs
    LOG_ADDED = "log_added"
    LOG_DELETED = "log_deleted"

    # Insights
    INSIGHT_GENERATED = "insight_generated"
    INSIGHT_FALLBACK = "insight_fallback"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'user', 'family', 'log')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Who did it
    actor_id: Optional[str] = Field(
        default=None,
        description="User the action was performed by or for"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "actor_id": self.actor_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.family_created(family_id, name, creator_id)
        event = AuditEventBuilder.log_deleted(log_id, family_id)
    """

    @staticmethod
    def user_registered(user_id: str, family_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REGISTERED,
            entity_type="user",
            entity_id=user_id,
            actor_id=user_id,
            description=f"User registered: {user_id}",
            details={"family_id": family_id},
            is_user_action=True,
        )

    @staticmethod
    def user_updated(user_id: str, family_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_UPDATED,
            entity_type="user",
            entity_id=user_id,
            actor_id=user_id,
            description=f"User updated: {user_id}",
            details={"family_id": family_id},
        )

    @staticmethod
    def demo_household_seeded(family_id: str, log_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEMO_HOUSEHOLD_SEEDED,
            entity_type="family",
            entity_id=family_id,
            description=f"Demo household seeded with {log_count} logs",
            details={"log_count": log_count},
        )

    @staticmethod
    def family_created(family_id: str, name: str, creator_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FAMILY_CREATED,
            entity_type="family",
            entity_id=family_id,
            actor_id=creator_id,
            description=f"Family created: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def family_joined(
        family_id: str,
        user_id: str,
        already_member: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FAMILY_JOINED,
            entity_type="family",
            entity_id=family_id,
            actor_id=user_id,
            description=f"User {user_id} joined family {family_id}",
            details={"already_member": already_member},
            is_user_action=True,
        )

    @staticmethod
    def invite_code_rejected(invite_code: str, user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVITE_CODE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="family",
            actor_id=user_id,
            description="Invite code did not match any family",
            details={"invite_code": invite_code},
            is_user_action=True,
        )

    @staticmethod
    def invite_code_collision(invite_code: str, attempt: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVITE_CODE_COLLISION,
            severity=AuditSeverity.WARNING,
            entity_type="family",
            description=f"Generated invite code already in use (attempt {attempt})",
            details={"invite_code": invite_code, "attempt": attempt},
        )

    @staticmethod
    def session_started(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_STARTED,
            entity_type="session",
            entity_id=user_id,
            actor_id=user_id,
            description=f"Session started for {user_id}",
            is_user_action=True,
        )

    @staticmethod
    def session_cleared(user_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_CLEARED,
            entity_type="session",
            entity_id=user_id,
            actor_id=user_id,
            description="Session cleared",
            is_user_action=True,
        )

    @staticmethod
    def session_mismatch(
        expected_user_id: str,
        session_user_id: Optional[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_MISMATCH,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            entity_id=session_user_id,
            actor_id=expected_user_id,
            description="Acting user does not match the signed-in session",
            details={
                "expected_user_id": expected_user_id,
                "session_user_id": session_user_id,
            },
        )

    @staticmethod
    def log_added(log_id: str, family_id: str, user_id: str, amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOG_ADDED,
            entity_type="log",
            entity_id=log_id,
            actor_id=user_id,
            description=f"Recharge logged: ₦{amount}",
            details={"family_id": family_id, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def log_deleted(log_id: str, family_id: str, found: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOG_DELETED,
            severity=AuditSeverity.INFO if found else AuditSeverity.WARNING,
            entity_type="log",
            entity_id=log_id,
            description="Log deleted" if found else "Log to delete was not found",
            details={"family_id": family_id, "found": found},
            is_user_action=True,
        )

    @staticmethod
    def insight_generated(family_id: Optional[str], log_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHT_GENERATED,
            entity_type="family",
            entity_id=family_id,
            description=f"Usage insight generated from {log_count} logs",
            details={"log_count": log_count},
        )

    @staticmethod
    def insight_fallback(
        family_id: Optional[str],
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHT_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_type="family",
            entity_id=family_id,
            description="Usage insight unavailable, fallback returned",
            error_message=error_message,
        )
