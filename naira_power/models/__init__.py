"""
Data Models Package

This package contains all Pydantic models used in Naira Power.
All data flowing through the system must conform to these schemas.
"""

from naira_power.models.household import (
    AnalysisResult,
    Family,
    FamilyActionResult,
    LogActionResult,
    UsageStats,
    User,
    UtilityLog,
    utc_now,
)
from naira_power.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Household models
    "AnalysisResult",
    "Family",
    "FamilyActionResult",
    "LogActionResult",
    "UsageStats",
    "User",
    "UtilityLog",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
