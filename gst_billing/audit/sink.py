"""
Abstract Audit Sink

DESIGN DECISION: The billing core never talks to storage directly.
Callers that want audit events persisted plug in an AuditSink:
1. The application's database writer
2. In-memory lists for testing
3. Nothing at all (events are still logged locally)
"""

from abc import ABC, abstractmethod

from gst_billing.models.audit import AuditEvent


class AuditSink(ABC):
    """
    Abstract interface for persisting audit events.

    Implementations must be append-only.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event.

        Returns:
            True if the event was stored
        """
        pass


class InMemoryAuditSink(AuditSink):
    """Keeps events in a list. Used by tests and local runs."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True
