"""
Audit Models for GST Billing

Every bill number handed out, every rejected GSTIN and every drafted bill
is recorded as an audit event. This provides:
1. Traceability of which numbers were issued and when
2. A record of collisions (bill numbers are not structurally unique)
3. Debugging information when a total looks wrong

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Tax
    TAX_COMPUTED = "tax_computed"

    # Numbering
    BILL_NUMBER_GENERATED = "bill_number_generated"
    BILL_NUMBER_COLLISION = "bill_number_collision"
    BILL_NUMBER_EXHAUSTED = "bill_number_exhausted"

    # Registration ids
    REGISTRATION_ID_ACCEPTED = "registration_id_accepted"
    REGISTRATION_ID_REJECTED = "registration_id_rejected"

    # Bills
    BILL_DRAFTED = "bill_drafted"

    # System events
    SYSTEM_ERROR = "system_error"


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

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
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

    # Context - what is this about? Bill numbers are the natural key here.
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'bill', 'registration_id')"
    )
    entity_ref: Optional[str] = Field(
        default=None,
        description="Reference of the entity (e.g., the bill number)"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events of one bill draft)"
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

    error_code: Optional[str] = None
    error_message: Optional[str] = None

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
            "entity_ref": self.entity_ref,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.bill_number_generated("INV241000042", correlation_id)
        event = AuditEventBuilder.bill_drafted(draft, correlation_id)
    """

    @staticmethod
    def tax_computed(
        taxable_amount: str,
        cgst_amount: str,
        sgst_amount: str,
        total: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TAX_COMPUTED,
            severity=AuditSeverity.DEBUG,
            entity_type="tax",
            correlation_id=correlation_id,
            description=f"GST computed on ₹{taxable_amount}",
            details={
                "taxable_amount": taxable_amount,
                "cgst_amount": cgst_amount,
                "sgst_amount": sgst_amount,
                "total": total,
            },
        )

    @staticmethod
    def bill_number_generated(
        bill_number: str,
        attempts: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_NUMBER_GENERATED,
            entity_type="bill",
            entity_ref=bill_number,
            correlation_id=correlation_id,
            description=f"Bill number issued: {bill_number}",
            details={"attempts": attempts},
        )

    @staticmethod
    def bill_number_collision(
        bill_number: str,
        attempt: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_NUMBER_COLLISION,
            severity=AuditSeverity.WARNING,
            entity_type="bill",
            entity_ref=bill_number,
            correlation_id=correlation_id,
            description=f"Bill number {bill_number} already taken (attempt {attempt})",
            details={"attempt": attempt},
        )

    @staticmethod
    def bill_number_exhausted(
        attempts: int,
        last_candidate: Optional[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_NUMBER_EXHAUSTED,
            severity=AuditSeverity.ERROR,
            entity_type="bill",
            entity_ref=last_candidate,
            correlation_id=correlation_id,
            description=f"No free bill number after {attempts} attempts",
            details={"attempts": attempts},
            error_code="bill_number_exhausted",
        )

    @staticmethod
    def registration_id_accepted(
        gstin: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_ID_ACCEPTED,
            severity=AuditSeverity.DEBUG,
            entity_type="registration_id",
            entity_ref=gstin,
            correlation_id=correlation_id,
            description="GSTIN accepted",
        )

    @staticmethod
    def registration_id_rejected(
        candidate: Any,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REGISTRATION_ID_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="registration_id",
            entity_ref=str(candidate)[:50],
            correlation_id=correlation_id,
            description="GSTIN rejected: does not match the registration format",
            details={"length": len(candidate) if isinstance(candidate, str) else None},
        )

    @staticmethod
    def bill_drafted(
        bill_number: str,
        customer_name: str,
        line_count: int,
        total: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_DRAFTED,
            entity_type="bill",
            entity_ref=bill_number,
            correlation_id=correlation_id,
            description=f"Bill {bill_number} drafted for {customer_name}: ₹{total}",
            details={
                "customer_name": customer_name,
                "line_count": line_count,
                "total_with_gst": total,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"System error: {error_type}",
            details=details or {},
            error_code=error_type,
            error_message=error_message,
        )
