"""Audit logging package."""

from naira_power.audit.logger import AuditLogger, get_logger

__all__ = ["AuditLogger", "get_logger"]
