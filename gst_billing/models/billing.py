"""
Core Data Models for GST Billing

These models are the values handed to the persistence and presentation
collaborators. They are designed to:
1. Carry exact Decimal amounts (never binary floats)
2. Be immutable once computed
3. Map cleanly onto the stored bills and bill_items columns

DESIGN DECISION: Amounts are rounded to paise per line item, and bill totals
are sums of already rounded lines. A printed invoice then always adds up.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# =============================================================================
# ENUMS
# =============================================================================

class PaymentStatus(str, Enum):
    """Payment status for a bill."""
    PENDING = "pending"  # Every new bill starts here
    PAID = "paid"
    PARTIAL = "partial"
    OVERDUE = "overdue"


# =============================================================================
# TAX MODELS
# =============================================================================

class TaxBreakdown(BaseModel):
    """
    Dual-component GST on a single taxable amount.

    cgst_amount and sgst_amount are the two equal components
    (component A and component B). total includes the taxable amount.
    """
    model_config = ConfigDict(frozen=True)

    taxable_amount: Decimal = Field(..., ge=0, description="Pre-tax base in INR")
    cgst_rate: Decimal = Field(..., ge=0)
    sgst_rate: Decimal = Field(..., ge=0)
    cgst_amount: Decimal = Field(..., ge=0, description="Central GST in INR")
    sgst_amount: Decimal = Field(..., ge=0, description="State GST in INR")
    total: Decimal = Field(..., ge=0, description="Taxable amount plus both components")

    @model_validator(mode='after')
    def validate_total(self) -> 'TaxBreakdown':
        """Total must be exactly the base plus both components."""
        if self.total != self.taxable_amount + self.cgst_amount + self.sgst_amount:
            raise ValueError("Total must equal taxable amount plus CGST plus SGST")
        return self

    @property
    def component_a(self) -> Decimal:
        return self.cgst_amount

    @property
    def component_b(self) -> Decimal:
        return self.sgst_amount

    @property
    def total_tax(self) -> Decimal:
        """Combined GST (both components)."""
        return self.cgst_amount + self.sgst_amount

    def to_record(self) -> dict:
        """
        Convert to the column mapping stored on a bill.

        Column names follow the bills table:
        total_amount, cgst_amount, sgst_amount, total_with_gst
        """
        return {
            "total_amount": self.taxable_amount,
            "cgst_amount": self.cgst_amount,
            "sgst_amount": self.sgst_amount,
            "total_with_gst": self.total,
        }


class BillLineItem(BaseModel):
    """
    A line the user adds to a bill: an item, how many, at what price.

    This is input. Tax is computed from it by the calculator.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Item name as printed on the invoice"
    )
    quantity: Decimal = Field(
        ...,
        gt=0,
        description="Number of units sold"
    )
    unit_price: Decimal = Field(
        ...,
        ge=0,
        description="Price per unit in INR, before tax"
    )


class LineItemTax(BaseModel):
    """A priced bill line, as stored in bill_items."""
    model_config = ConfigDict(frozen=True)

    description: str
    quantity: Decimal
    unit_price: Decimal
    taxable_amount: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    total: Decimal

    def to_record(self) -> dict:
        return {
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "taxable_amount": self.taxable_amount,
            "cgst_amount": self.cgst_amount,
            "sgst_amount": self.sgst_amount,
            "total": self.total,
        }


class BillTotals(BaseModel):
    """Bill-level sums of rounded line values."""
    model_config = ConfigDict(frozen=True)

    taxable_amount: Decimal = Decimal("0.00")
    cgst_amount: Decimal = Decimal("0.00")
    sgst_amount: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")
    line_count: int = Field(default=0, ge=0)

    @property
    def total_tax(self) -> Decimal:
        return self.cgst_amount + self.sgst_amount

    def to_record(self) -> dict:
        return {
            "total_amount": self.taxable_amount,
            "cgst_amount": self.cgst_amount,
            "sgst_amount": self.sgst_amount,
            "total_with_gst": self.total,
        }


# =============================================================================
# REGISTRATION ID
# =============================================================================

class RegistrationId(BaseModel):
    """
    A structurally valid GSTIN, split into its segments.

    Example: 29ABCDE1234F1Z5
    - 29: state code (Karnataka)
    - ABCDE1234F: PAN
    - 1: entity number
    - Z: default character
    - 5: check character (not verified arithmetically)
    """
    model_config = ConfigDict(frozen=True)

    state_code: str = Field(..., min_length=2, max_length=2)
    pan: str = Field(..., min_length=10, max_length=10)
    entity_number: str = Field(..., min_length=1, max_length=1)
    default_char: str = Field(default="Z", pattern="^Z$")
    check_char: str = Field(..., min_length=1, max_length=1)

    def __str__(self) -> str:
        return (
            f"{self.state_code}{self.pan}{self.entity_number}"
            f"{self.default_char}{self.check_char}"
        )


# =============================================================================
# BILL DRAFT
# =============================================================================

class BillHeader(BaseModel):
    """
    What the user typed into the new-bill form.

    Validated before a bill number is issued, so a rejected form
    never consumes a number.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    customer_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Customer name printed on the invoice"
    )
    gstin: Optional[str] = Field(
        default=None,
        description="Customer GSTIN (optional)"
    )
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator('gstin')
    @classmethod
    def empty_gstin_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class BillDraft(BillHeader):
    """
    A fully computed bill, ready for the caller to persist.

    CRITICAL: Nothing here has been saved. The bill number is NOT
    guaranteed unique unless it was allocated against a uniqueness check.
    """

    bill_number: str = Field(..., min_length=1)
    bill_date: datetime
    lines: list[LineItemTax] = Field(default_factory=list)
    totals: BillTotals = Field(default_factory=BillTotals)
    payment_status: PaymentStatus = PaymentStatus.PENDING

    def to_record(self) -> dict:
        """Bill row for storage (line items are stored separately)."""
        record = {
            "bill_number": self.bill_number,
            "customer_name": self.customer_name,
            "gstin": self.gstin or "",
            "bill_date": self.bill_date.isoformat(),
            "payment_status": self.payment_status.value,
            "notes": self.notes or "",
        }
        record.update(self.totals.to_record())
        return record
