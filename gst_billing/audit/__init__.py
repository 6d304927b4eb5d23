"""Audit logging package."""

from gst_billing.audit.logger import AuditLogger, create_correlation_id
from gst_billing.audit.sink import AuditSink, InMemoryAuditSink

__all__ = ["AuditLogger", "AuditSink", "InMemoryAuditSink", "create_correlation_id"]
