"""Bill numbering package."""

from gst_billing.numbering.generator import (
    DocumentNumberExhaustedError,
    NumberingError,
    allocate_document_number,
    generate_document_number,
)

__all__ = [
    "DocumentNumberExhaustedError",
    "NumberingError",
    "allocate_document_number",
    "generate_document_number",
]
