"""
Data Models Package

This package contains all Pydantic models used by the billing core.
Every value handed to a caller conforms to one of these schemas.
"""

from gst_billing.models.billing import (
    BillDraft,
    BillHeader,
    BillLineItem,
    BillTotals,
    LineItemTax,
    PaymentStatus,
    RegistrationId,
    TaxBreakdown,
)
from gst_billing.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Billing models
    "BillDraft",
    "BillHeader",
    "BillLineItem",
    "BillTotals",
    "LineItemTax",
    "PaymentStatus",
    "RegistrationId",
    "TaxBreakdown",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
