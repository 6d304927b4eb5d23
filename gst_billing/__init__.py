"""
GST Billing - Source Package

The calculation core behind GST tax invoices for a small business:
tax on a taxable amount, bill numbers, and GSTIN format checks.

DESIGN PRINCIPLES:
1. Money is Decimal, rounded to paise per line
2. Clock and randomness are injected, not global
3. Validators answer yes/no, calculators fail loudly
4. Nothing here touches storage
"""

from gst_billing.numbering import allocate_document_number, generate_document_number
from gst_billing.tax import InvalidAmountError, compute_tax
from gst_billing.validation import is_valid_registration_id

__version__ = "1.0.0"
__author__ = "GST Billing Team"

__all__ = [
    "InvalidAmountError",
    "allocate_document_number",
    "compute_tax",
    "generate_document_number",
    "is_valid_registration_id",
]
