"""Audit logging for certificate lifecycle events."""

from .logger import AuditLogger, AuditEvent, EventType

__all__ = ["AuditLogger", "AuditEvent", "EventType"]
