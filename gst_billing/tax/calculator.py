"""
GST Tax Calculator

Computes the two GST components (CGST and SGST) on a taxable amount.
By default each component is 9%, 18% combined.

DESIGN DECISION: All arithmetic is Decimal. Floats are accepted at the
boundary but converted through str() first, so 0.1 stays 0.1 and does not
become 0.1000000000000000055511151231257827.

ROUNDING: Amounts are rounded to paise (0.01, half-up) at two points only:
1. The taxable amount of each line (quantity x unit price)
2. Each tax component
Bill totals are sums of rounded lines and are never rounded again.

Every other product and sum must be exact. Decimal silently rounds results
wider than its precision (28 digits), so that arithmetic runs with the
Inexact trap set and an amount too large to compute exactly is rejected.
"""

from contextlib import contextmanager
from decimal import (
    ROUND_HALF_UP,
    Context,
    Decimal,
    Inexact,
    InvalidOperation,
    localcontext,
)
from typing import Iterable, Optional, Union

import structlog

from gst_billing.config import get_settings
from gst_billing.models.billing import BillTotals, LineItemTax, TaxBreakdown


logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")

# Rounding to paise is the one place precision may be dropped
_ROUNDING_CONTEXT = Context(rounding=ROUND_HALF_UP)

AmountLike = Union[Decimal, int, float, str]


class TaxCalculationError(ValueError):
    """Base exception for tax calculation errors."""
    pass


class InvalidAmountError(TaxCalculationError):
    """Amount is negative, NaN, infinite, too large or not a number at all."""

    def __init__(self, value, message: str):
        self.value = value
        super().__init__(message)

    def __reduce__(self):
        return (type(self), (self.value, str(self)))


class InvalidRateError(TaxCalculationError):
    """Tax rate is negative or not a finite number."""
    pass


class InvalidQuantityError(TaxCalculationError):
    """Line quantity is not a positive number."""
    pass


@contextmanager
def _exact_arithmetic(value):
    """Raise InvalidAmountError instead of rounding an intermediate result."""
    with localcontext() as ctx:
        ctx.traps[Inexact] = True
        try:
            yield
        except Inexact as e:
            raise InvalidAmountError(
                value, f"Amount is too large to compute exactly: {value!r}"
            ) from e


def _to_decimal(value: AmountLike) -> Optional[Decimal]:
    """
    Convert an amount-like value to Decimal.

    Returns None if the value is not numeric. bool is rejected even though
    it is an int subclass.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            return None
    return None


def round_currency(amount: Decimal) -> Decimal:
    """Round to paise (2 decimal places), half-up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP, context=_ROUNDING_CONTEXT)


def to_amount(value: AmountLike) -> Decimal:
    """
    Validate and normalize a monetary amount.

    Raises:
        InvalidAmountError: If the value is negative, NaN, infinite,
            not numeric, or too large to represent in paise.
    """
    amount = _to_decimal(value)
    if amount is None:
        raise InvalidAmountError(value, f"Amount must be a number, got {value!r}")
    if not amount.is_finite():
        raise InvalidAmountError(value, f"Amount must be finite, got {value!r}")
    if amount < 0:
        raise InvalidAmountError(value, f"Amount cannot be negative, got {value!r}")

    try:
        # abs() turns -0 into 0
        return abs(round_currency(amount))
    except InvalidOperation as e:
        raise InvalidAmountError(value, f"Amount is too large: {value!r}") from e


def _to_rate(value: AmountLike, name: str) -> Decimal:
    rate = _to_decimal(value)
    if rate is None or not rate.is_finite():
        raise InvalidRateError(f"{name} must be a finite number, got {value!r}")
    if rate < 0:
        raise InvalidRateError(f"{name} cannot be negative, got {value!r}")
    return rate


def compute_tax(
    taxable_amount: AmountLike,
    rate_a: Optional[AmountLike] = None,
    rate_b: Optional[AmountLike] = None,
) -> TaxBreakdown:
    """
    Compute CGST, SGST and the grand total for a taxable amount.

    Args:
        taxable_amount: Pre-tax base in INR. Must be >= 0.
        rate_a: CGST rate. Defaults to the configured rate (0.09).
        rate_b: SGST rate. Defaults to the configured rate (0.09).

    Returns:
        TaxBreakdown with both components and total = base + CGST + SGST

    Raises:
        InvalidAmountError: If the amount is negative, not finite, or too
            large for the tax and total to be computed exactly
        InvalidRateError: If a rate is negative or not finite
    """
    settings = get_settings()
    amount = to_amount(taxable_amount)
    cgst_rate = _to_rate(settings.cgst_rate if rate_a is None else rate_a, "rate_a")
    sgst_rate = _to_rate(settings.sgst_rate if rate_b is None else rate_b, "rate_b")

    with _exact_arithmetic(taxable_amount):
        cgst_amount = round_currency(amount * cgst_rate)
        sgst_amount = round_currency(amount * sgst_rate)
        total = amount + cgst_amount + sgst_amount

    breakdown = TaxBreakdown(
        taxable_amount=amount,
        cgst_rate=cgst_rate,
        sgst_rate=sgst_rate,
        cgst_amount=cgst_amount,
        sgst_amount=sgst_amount,
        total=total,
    )

    logger.debug(
        "tax_computed",
        taxable_amount=str(breakdown.taxable_amount),
        cgst_amount=str(breakdown.cgst_amount),
        sgst_amount=str(breakdown.sgst_amount),
        total=str(breakdown.total),
    )
    return breakdown


def compute_line_item(
    description: str,
    quantity: AmountLike,
    unit_price: AmountLike,
    rate_a: Optional[AmountLike] = None,
    rate_b: Optional[AmountLike] = None,
) -> LineItemTax:
    """
    Price a single bill line: quantity x unit price, then GST on the result.

    Raises:
        InvalidQuantityError: If quantity is not a positive number
        InvalidAmountError: If unit price is negative or not finite, or the
            line is too large to compute exactly
    """
    qty = _to_decimal(quantity)
    if qty is None or not qty.is_finite() or qty <= 0:
        raise InvalidQuantityError(f"Quantity must be a positive number, got {quantity!r}")

    price = to_amount(unit_price)
    with _exact_arithmetic(unit_price):
        line_amount = price * qty
    breakdown = compute_tax(line_amount, rate_a=rate_a, rate_b=rate_b)

    return LineItemTax(
        description=description,
        quantity=qty,
        unit_price=price,
        taxable_amount=breakdown.taxable_amount,
        cgst_amount=breakdown.cgst_amount,
        sgst_amount=breakdown.sgst_amount,
        total=breakdown.total,
    )


def summarize_bill(lines: Iterable[LineItemTax]) -> BillTotals:
    """
    Sum priced lines into bill totals.

    Lines are already rounded, so the totals are exact sums and
    CGST + SGST + taxable always equals the grand total.

    Raises:
        InvalidAmountError: If the totals are too large to sum exactly
    """
    taxable = Decimal("0.00")
    cgst = Decimal("0.00")
    sgst = Decimal("0.00")
    total = Decimal("0.00")
    count = 0

    for line in lines:
        with _exact_arithmetic(line.total):
            taxable += line.taxable_amount
            cgst += line.cgst_amount
            sgst += line.sgst_amount
            total += line.total
        count += 1

    return BillTotals(
        taxable_amount=taxable,
        cgst_amount=cgst,
        sgst_amount=sgst,
        total=total,
        line_count=count,
    )
