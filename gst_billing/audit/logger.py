"""
Audit Logger

DESIGN DECISION: Every bill number issued and every rejected GSTIN is logged.
Bill numbers are random, so the audit trail is the only record of which
ones were handed out.

The audit logger:
- Is synchronous, like the rest of the billing core
- Gracefully handles sink failures (a broken sink never blocks billing)
- Supports correlation IDs to trace related events
"""

from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from gst_billing.audit.sink import AuditSink
from gst_billing.models.audit import AuditEvent, AuditEventBuilder


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


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The configured sink (for persistence), if any
    """

    def __init__(
        self,
        sink: Optional[AuditSink] = None,
    ):
        """
        Initialize audit logger.

        Args:
            sink: Where to persist events.
                  If None, only logs locally.
        """
        self._sink = sink
        self._logger = structlog.get_logger(__name__)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to the sink if available.

        Returns True if the sink write succeeded (or no sink configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._sink:
            try:
                return self._sink.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_sink_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_bill_number_generated(
        self,
        bill_number: str,
        attempts: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.bill_number_generated(
            bill_number=bill_number,
            attempts=attempts,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_bill_number_collision(
        self,
        bill_number: str,
        attempt: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.bill_number_collision(
            bill_number=bill_number,
            attempt=attempt,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_bill_number_exhausted(
        self,
        attempts: int,
        last_candidate: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.bill_number_exhausted(
            attempts=attempts,
            last_candidate=last_candidate,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_registration_id_checked(
        self,
        candidate: Any,
        accepted: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log the outcome of a GSTIN check."""
        if accepted:
            event = AuditEventBuilder.registration_id_accepted(
                gstin=candidate,
                correlation_id=correlation_id,
            )
        else:
            event = AuditEventBuilder.registration_id_rejected(
                candidate=candidate,
                correlation_id=correlation_id,
            )
        self.log(event)

    def log_tax_computed(
        self,
        taxable_amount: str,
        cgst_amount: str,
        sgst_amount: str,
        total: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.tax_computed(
            taxable_amount=taxable_amount,
            cgst_amount=cgst_amount,
            sgst_amount=sgst_amount,
            total=total,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_bill_drafted(
        self,
        bill_number: str,
        customer_name: str,
        line_count: int,
        total: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.bill_drafted(
            bill_number=bill_number,
            customer_name=customer_name,
            line_count=line_count,
            total=total,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., creating a bill).
    Pass it through all subsequent operations.
    """
    return uuid4()
