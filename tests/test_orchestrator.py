"""Tests for the bill draft flow."""

from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from gst_billing.models.audit import AuditEventType
from gst_billing.models.billing import BillDraft, BillLineItem, PaymentStatus
from gst_billing.numbering import DocumentNumberExhaustedError
from gst_billing.orchestrator import BillDraftFlow
from gst_billing.tax import InvalidAmountError, InvalidQuantityError
from gst_billing.validation import InvalidRegistrationIdError


@pytest.fixture
def widget_items():
    return [
        BillLineItem(description="Widget", quantity=Decimal("2"), unit_price=Decimal("500.00")),
    ]


class TestBillDraftFlow:
    """Tests for BillDraftFlow.create_draft."""

    def test_creates_draft(self, widget_items, october_2024, sequence_rng, audit_logger):
        """Test a complete draft with GSTIN, number and totals."""
        flow = BillDraftFlow(audit_logger=audit_logger, rng=sequence_rng([42]))
        draft = flow.create_draft(
            customer_name="Acme Traders",
            items=widget_items,
            gstin="29ABCDE1234F1Z5",
            now=october_2024,
        )
        assert isinstance(draft, BillDraft)
        assert draft.bill_number == "INV24100042"
        assert draft.gstin == "29ABCDE1234F1Z5"
        assert draft.bill_date == october_2024
        assert draft.payment_status == PaymentStatus.PENDING
        assert draft.totals.taxable_amount == Decimal("1000.00")
        assert draft.totals.cgst_amount == Decimal("90.00")
        assert draft.totals.sgst_amount == Decimal("90.00")
        assert draft.totals.total == Decimal("1180.00")
        assert len(draft.lines) == 1

    def test_gstin_is_optional(self, widget_items, october_2024, sequence_rng):
        """Test an empty GSTIN skips validation and is stored as None."""
        flow = BillDraftFlow(rng=sequence_rng([1]))
        draft = flow.create_draft("Walk-in", widget_items, gstin="", now=october_2024)
        assert draft.gstin is None

    def test_invalid_gstin_stops_flow(self, widget_items, october_2024, sequence_rng, audit_logger, audit_sink):
        """Test a malformed GSTIN raises before any number is issued."""
        rng = sequence_rng([1])
        flow = BillDraftFlow(audit_logger=audit_logger, rng=rng)
        with pytest.raises(InvalidRegistrationIdError):
            flow.create_draft("Acme", widget_items, gstin="29abcde1234f1z5", now=october_2024)
        assert rng.calls == 0
        types = [event.event_type for event in audit_sink.events]
        assert types == [AuditEventType.REGISTRATION_ID_REJECTED]

    def test_uses_uniqueness_check(self, widget_items, october_2024, sequence_rng):
        """Test taken numbers are skipped when a checker is configured."""
        flow = BillDraftFlow(
            is_number_taken={"INV24100042"}.__contains__,
            rng=sequence_rng([42, 43]),
        )
        draft = flow.create_draft("Acme", widget_items, now=october_2024)
        assert draft.bill_number == "INV24100043"

    def test_exhausted_numbers_propagate(self, widget_items, october_2024, sequence_rng, monkeypatch):
        """Test allocation failure reaches the caller."""
        monkeypatch.setenv("GST_BILLING_MAX_NUMBER_ATTEMPTS", "2")
        flow = BillDraftFlow(is_number_taken=lambda n: True, rng=sequence_rng([1, 2]))
        with pytest.raises(DocumentNumberExhaustedError):
            flow.create_draft("Acme", widget_items, now=october_2024)

    def test_empty_bill(self, october_2024, sequence_rng):
        """Test a bill without items has zero totals."""
        flow = BillDraftFlow(rng=sequence_rng([5]))
        draft = flow.create_draft("Acme", [], now=october_2024)
        assert draft.totals.total == Decimal("0")
        assert draft.lines == []

    def test_pricing_error_is_audited(self, october_2024, sequence_rng, audit_logger, audit_sink):
        """Test a bad line raises and leaves a system_error event."""
        bad_item = BillLineItem.model_construct(
            description="Broken", quantity=Decimal("0"), unit_price=Decimal("10")
        )
        flow = BillDraftFlow(audit_logger=audit_logger, rng=sequence_rng([5]))
        with pytest.raises(InvalidQuantityError):
            flow.create_draft("Acme", [bad_item], now=october_2024)
        last = audit_sink.events[-1]
        assert last.event_type == AuditEventType.SYSTEM_ERROR
        assert last.error_code == "InvalidQuantityError"
        assert last.details["bill_number"] == "INV24100005"

    def test_events_share_correlation_id(self, widget_items, october_2024, sequence_rng, audit_logger, audit_sink):
        """Test every event of one draft carries the same correlation id."""
        correlation_id = uuid4()
        flow = BillDraftFlow(audit_logger=audit_logger, rng=sequence_rng([7]))
        flow.create_draft(
            "Acme",
            widget_items,
            gstin="29ABCDE1234F1Z5",
            now=october_2024,
            correlation_id=correlation_id,
        )
        types = [event.event_type for event in audit_sink.events]
        assert types == [
            AuditEventType.REGISTRATION_ID_ACCEPTED,
            AuditEventType.BILL_NUMBER_GENERATED,
            AuditEventType.TAX_COMPUTED,
            AuditEventType.BILL_DRAFTED,
        ]
        assert {event.correlation_id for event in audit_sink.events} == {correlation_id}

    def test_draft_record(self, widget_items, october_2024, sequence_rng):
        """Test the bill row handed to storage."""
        flow = BillDraftFlow(rng=sequence_rng([42]))
        draft = flow.create_draft("Acme", widget_items, notes="Deliver Monday", now=october_2024)
        record = draft.to_record()
        assert record["bill_number"] == "INV24100042"
        assert record["total_amount"] == Decimal("1000.00")
        assert record["total_with_gst"] == Decimal("1180.00")
        assert record["payment_status"] == "pending"
        assert record["gstin"] == ""
        assert record["notes"] == "Deliver Monday"
        assert record["bill_date"] == "2024-10-05T11:30:00"

    @pytest.mark.parametrize("customer_name", ["", "   "])
    def test_blank_customer_stops_flow(self, customer_name, widget_items, october_2024, sequence_rng, audit_logger, audit_sink):
        """Test a blank customer name raises before any number is issued."""
        rng = sequence_rng([1])
        flow = BillDraftFlow(audit_logger=audit_logger, rng=rng)
        with pytest.raises(ValidationError):
            flow.create_draft(customer_name, widget_items, now=october_2024)
        assert rng.calls == 0
        assert len(audit_sink.events) == 1
        event = audit_sink.events[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.error_code == "BillHeaderInvalid"
        assert event.details["fields"] == ["customer_name"]

    def test_bill_too_large_to_total_is_audited(self, october_2024, sequence_rng, audit_logger, audit_sink):
        """Test a bill whose totals overflow exact arithmetic raises and is audited."""
        items = [
            BillLineItem(
                description="Plant",
                quantity=Decimal("1"),
                unit_price=Decimal("9999999999999999999999999.99"),
            )
            for _ in range(20)
        ]
        flow = BillDraftFlow(audit_logger=audit_logger, rng=sequence_rng([5]))
        with pytest.raises(InvalidAmountError, match="too large to compute exactly"):
            flow.create_draft("Acme", items, now=october_2024)
        last = audit_sink.events[-1]
        assert last.event_type == AuditEventType.SYSTEM_ERROR
        assert last.error_code == "InvalidAmountError"
        assert AuditEventType.TAX_COMPUTED not in [e.event_type for e in audit_sink.events]
