"""GST tax calculation package."""

from gst_billing.tax.calculator import (
    InvalidAmountError,
    InvalidQuantityError,
    InvalidRateError,
    TaxCalculationError,
    compute_line_item,
    compute_tax,
    round_currency,
    summarize_bill,
    to_amount,
)

__all__ = [
    "InvalidAmountError",
    "InvalidQuantityError",
    "InvalidRateError",
    "TaxCalculationError",
    "compute_line_item",
    "compute_tax",
    "round_currency",
    "summarize_bill",
    "to_amount",
]
