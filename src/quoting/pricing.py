"""
Quotation arithmetic.

Every figure shown for a quotation (form preview, list, PDF) comes from
here. Inputs are assumed validated: quantity >= 1, price >= 0.01 and
discount within 0..100. Nothing is clamped or rounded; rounding is a
display concern (see utils.pure.format_currency).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Tuple

from store.models import QuotationItem
from utils.config import VAT_RATE

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class LineBreakdown:
    item: QuotationItem
    line_total: Decimal  # price x quantity
    discount_amount: Decimal
    net_line: Decimal  # line_total - discount_amount


@dataclass(frozen=True)
class QuotationTotals:
    lines: Tuple[LineBreakdown, ...]
    subtotal: Decimal
    vat_rate: Decimal
    vat: Decimal
    grand_total: Decimal


def line_breakdown(item: QuotationItem) -> LineBreakdown:
    line_total = Decimal(item.price) * item.quantity
    if item.discount:
        discount_amount = line_total * (Decimal(item.discount) / HUNDRED)
    else:
        discount_amount = ZERO
    return LineBreakdown(
        item=item,
        line_total=line_total,
        discount_amount=discount_amount,
        net_line=line_total - discount_amount,
    )


def calculate_vat(amount: Decimal, vat_rate: Decimal = VAT_RATE) -> Decimal:
    return Decimal(amount) * vat_rate


def unit_vat(price: Decimal, vat_rate: Decimal = VAT_RATE) -> Decimal:
    """VAT on a single unit at its undiscounted price."""
    return calculate_vat(price, vat_rate)


def calculate_totals(
    items: Iterable[QuotationItem], vat_rate: Decimal = VAT_RATE
) -> QuotationTotals:
    lines = tuple(line_breakdown(item) for item in items)
    subtotal = sum((line.net_line for line in lines), ZERO)
    vat = calculate_vat(subtotal, vat_rate)
    return QuotationTotals(
        lines=lines,
        subtotal=subtotal,
        vat_rate=vat_rate,
        vat=vat,
        grand_total=subtotal + vat,
    )


def calculate_subtotal(items: Iterable[QuotationItem]) -> Decimal:
    """The value stored as Quotation.total."""
    return sum((line_breakdown(item).net_line for item in items), ZERO)
