"""
Bill Draft Orchestrator

Ties the billing components together into the "create bill" flow:
1. Check the form (customer name, notes) and the GSTIN, if one was entered
2. Issue a bill number (checked against storage when a checker is given)
3. Price every line item (quantity x unit price, then GST)
4. Sum the lines into bill totals

DESIGN DECISION: The orchestrator computes, it does not persist.
The returned BillDraft is handed to the caller's storage layer as-is.
Every step is audited under one correlation id.
"""

import random
from datetime import datetime
from typing import Callable, Iterable, Optional
from uuid import UUID

from pydantic import ValidationError

from gst_billing.audit import AuditLogger, create_correlation_id
from gst_billing.models.billing import BillDraft, BillHeader, BillLineItem
from gst_billing.numbering import allocate_document_number, generate_document_number
from gst_billing.tax import TaxCalculationError, compute_line_item, summarize_bill
from gst_billing.validation import InvalidRegistrationIdError, is_valid_registration_id


class BillDraftFlow:
    """
    Orchestrates bill creation.

    Flow:
    1. Form and GSTIN check → rejected input stops the flow, no number is used
    2. Numbering → random number, retried on collision if is_number_taken is set
    3. Pricing → one LineItemTax per item
    4. Totals → BillTotals from the rounded lines
    """

    def __init__(
        self,
        is_number_taken: Optional[Callable[[str], bool]] = None,
        audit_logger: Optional[AuditLogger] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            is_number_taken: Returns True if a bill number already exists.
                If None, numbers are issued without a uniqueness check.
            audit_logger: Where audit events go. Defaults to local logging only.
            rng: Random source for bill numbers.
        """
        self._is_number_taken = is_number_taken
        self._audit_logger = audit_logger or AuditLogger()
        self._rng = rng

    def _issue_number(self, now: datetime, correlation_id: UUID) -> str:
        if self._is_number_taken is None:
            number = generate_document_number(now=now, rng=self._rng)
            self._audit_logger.log_bill_number_generated(
                bill_number=number,
                attempts=1,
                correlation_id=correlation_id,
            )
            return number

        return allocate_document_number(
            self._is_number_taken,
            now=now,
            rng=self._rng,
            audit_logger=self._audit_logger,
            correlation_id=correlation_id,
        )

    def create_draft(
        self,
        customer_name: str,
        items: Iterable[BillLineItem],
        gstin: Optional[str] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> BillDraft:
        """
        Build a complete bill draft.

        Raises:
            pydantic.ValidationError: If the customer name or notes are invalid
            InvalidRegistrationIdError: If a GSTIN was given and is malformed
            DocumentNumberExhaustedError: If no free bill number was found
            TaxCalculationError: If an item cannot be priced or the bill is
                too large to total exactly
        """
        correlation_id = correlation_id or create_correlation_id()
        now = now or datetime.now()

        # The form is checked before a number is issued
        try:
            header = BillHeader(customer_name=customer_name, gstin=gstin, notes=notes)
        except ValidationError as e:
            self._audit_logger.log_error(
                error_type="BillHeaderInvalid",
                error_message=str(e),
                details={"fields": [".".join(map(str, err["loc"])) for err in e.errors()]},
                correlation_id=correlation_id,
            )
            raise

        # An empty GSTIN is allowed, it is optional on the invoice
        if header.gstin:
            accepted = is_valid_registration_id(header.gstin)
            self._audit_logger.log_registration_id_checked(
                candidate=header.gstin,
                accepted=accepted,
                correlation_id=correlation_id,
            )
            if not accepted:
                raise InvalidRegistrationIdError(header.gstin)

        bill_number = self._issue_number(now, correlation_id)

        try:
            lines = [
                compute_line_item(
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                )
                for item in items
            ]
            totals = summarize_bill(lines)
        except TaxCalculationError as e:
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"bill_number": bill_number},
                correlation_id=correlation_id,
            )
            raise

        self._audit_logger.log_tax_computed(
            taxable_amount=str(totals.taxable_amount),
            cgst_amount=str(totals.cgst_amount),
            sgst_amount=str(totals.sgst_amount),
            total=str(totals.total),
            correlation_id=correlation_id,
        )

        draft = BillDraft(
            **header.model_dump(),
            bill_number=bill_number,
            bill_date=now,
            lines=lines,
            totals=totals,
        )

        self._audit_logger.log_bill_drafted(
            bill_number=draft.bill_number,
            customer_name=draft.customer_name,
            line_count=totals.line_count,
            total=str(totals.total),
            correlation_id=correlation_id,
        )
        return draft
