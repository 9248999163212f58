"""
Page layout for quotations and delivery notes.

Everything here is pure data: positions are millimetres measured from the
top edge of an A4 page, and nothing touches reportlab. render.py draws what
this module decides, so page breaks can be checked without producing a PDF.

Rows flow down from FIRST_ROW_Y. When the next row would cross the row
limit, a new page starts and the cursor goes back to TOP_MARGIN. A row is
always drawn whole on one page.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from quoting.pricing import QuotationTotals, calculate_totals, unit_vat
from store.models import Client, DeliveryNote, Product, Quotation
from utils import config
from utils.pure import format_currency, format_date, format_datetime, format_percent

PAGE_WIDTH = 210
PAGE_HEIGHT = 297
MARGIN = 20
TOP_MARGIN = 20

TABLE_TOP = 120  # header band of the item table
TABLE_HEADER_HEIGHT = 10
FIRST_ROW_Y = TABLE_TOP + TABLE_HEADER_HEIGHT

COMPACT_ROW_HEIGHT = 10
IMAGE_ROW_HEIGHT = 30
THUMBNAIL_SIZE = 24

QUOTATION_ROW_LIMIT = 240
# delivery notes stop earlier so rows stay clear of the signature lines
DELIVERY_ROW_LIMIT = 220

TOTALS_HEIGHT = 40
NOTES_HEIGHT = 20
SIGNATURE_Y = 230
SIGNATURE_WIDTH = 70
FOOTER_Y = 250

UNKNOWN_CLIENT = "Unknown Client"
UNKNOWN_PRODUCT = "Unknown Product"

QUOTATION_DISCLAIMER = (
    "Thank you for your business. "
    f"This quotation is valid for {config.QUOTATION_VALIDITY_DAYS} days."
)
DELIVERY_DISCLAIMER = "This delivery note must be signed on receipt."
# left, right
SIGNATURE_LABELS = ("Client Signature", "Company Representative")


class DocumentMode(str, Enum):
    BASE = "base"  # no VAT column
    EXTENDED = "extended"  # VAT per unit column, optional thumbnails
    DELIVERY = "delivery"  # product and quantity only


@dataclass(frozen=True)
class Column:
    title: str
    x: float
    align: str = "left"  # or "right": x is then the right edge


@dataclass(frozen=True)
class PlacedRow:
    cells: Tuple[str, ...]
    page: int
    y: float
    height: float
    image_url: Optional[str] = None


@dataclass(frozen=True)
class PlacedBlock:
    page: int
    y: float
    lines: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class DocumentLayout:
    title: str
    number: str
    date: str
    status: str
    issuer: str
    header_fields: Tuple[Tuple[str, str], ...]
    client_lines: Tuple[str, ...]
    mode: DocumentMode
    columns: Tuple[Column, ...]
    rows: Tuple[PlacedRow, ...]
    page_count: int
    footer_lines: Tuple[str, ...]
    totals: Optional[QuotationTotals] = None
    totals_block: Optional[PlacedBlock] = None
    notes_block: Optional[PlacedBlock] = None
    signatures: bool = False
    include_images: bool = False
    row_limit: float = QUOTATION_ROW_LIMIT

    def rows_on_page(self, page: int) -> List[PlacedRow]:
        return [r for r in self.rows if r.page == page]


@dataclass
class Cursor:
    """Running vertical position across pages."""

    y: float
    limit: float
    top: float = TOP_MARGIN
    page: int = 0

    def place(self, height: float) -> Tuple[int, float]:
        """Reserve height on the current page, or on a new one if it does not fit."""
        if self.y + height > self.limit and self.y > self.top:
            self.page += 1
            self.y = self.top
        placed = (self.page, self.y)
        self.y += height
        return placed


def paginate(
    heights: Iterable[float],
    start: float = FIRST_ROW_Y,
    limit: float = QUOTATION_ROW_LIMIT,
    top: float = TOP_MARGIN,
) -> List[Tuple[int, float]]:
    """(page, y) for each row height, pages numbered from 0."""
    cursor = Cursor(y=start, limit=limit, top=top)
    return [cursor.place(h) for h in heights]


def _client_lines(client: Optional[Client]) -> Tuple[str, ...]:
    if client is None:
        return (f"Name: {UNKNOWN_CLIENT}",)
    return (
        f"Name: {client.full_name}",
        f"Company: {client.company}",
        f"Phone: {client.phone}",
        f"Email: {client.email}",
    )


def _catalog(products: Sequence[Product]) -> dict:
    return {p.id: p for p in products}


def _quotation_columns(mode: DocumentMode, include_images: bool) -> Tuple[Column, ...]:
    item_x = MARGIN + 5 + (THUMBNAIL_SIZE + 3 if include_images else 0)
    if mode is DocumentMode.EXTENDED:
        return (
            Column("Item", item_x),
            Column("Qty", 104, "right"),
            Column("Unit Price", 128, "right"),
            Column("VAT/Unit", 150, "right"),
            Column("Discount", 168, "right"),
            Column("Total", PAGE_WIDTH - MARGIN - 2, "right"),
        )
    return (
        Column("Item", item_x),
        Column("Qty", 110, "right"),
        Column("Unit Price", 140, "right"),
        Column("Discount", 162, "right"),
        Column("Total", PAGE_WIDTH - MARGIN - 2, "right"),
    )


def layout_quotation(
    quotation: Quotation,
    client: Optional[Client],
    products: Sequence[Product],
    issuer: str,
    include_images: bool = False,
    vat_rate: Decimal = config.VAT_RATE,
    generated_at: Optional[datetime] = None,
) -> DocumentLayout:
    """
    Lay out a quotation. Totals come from the pricing engine on the items,
    never from the stored quotation.total.
    """
    generated_at = generated_at or datetime.now()
    mode = DocumentMode.EXTENDED if vat_rate > 0 else DocumentMode.BASE
    catalog = _catalog(products)
    totals = calculate_totals(quotation.items, vat_rate)
    row_height = IMAGE_ROW_HEIGHT if include_images else COMPACT_ROW_HEIGHT

    cursor = Cursor(y=FIRST_ROW_Y, limit=QUOTATION_ROW_LIMIT)
    rows = []
    for line in totals.lines:
        item = line.item
        product = catalog.get(item.product_id)
        discount = format_percent(item.discount) if item.discount else "-"
        cells = [product.name if product else UNKNOWN_PRODUCT, str(item.quantity)]
        cells.append(format_currency(item.price))
        if mode is DocumentMode.EXTENDED:
            cells.append(format_currency(unit_vat(item.price, vat_rate)))
        cells.extend([discount, format_currency(line.net_line)])
        page, y = cursor.place(row_height)
        rows.append(
            PlacedRow(
                cells=tuple(cells),
                page=page,
                y=y,
                height=row_height,
                image_url=product.image_url if (product and include_images) else None,
            )
        )

    cursor.y += 10  # gap before the totals rule
    page, y = cursor.place(TOTALS_HEIGHT)
    totals_block = PlacedBlock(
        page=page,
        y=y,
        lines=(
            ("Subtotal:", format_currency(totals.subtotal)),
            (f"VAT ({format_percent(vat_rate * 100)}):", format_currency(totals.vat)),
            ("Total:", format_currency(totals.grand_total)),
        ),
    )

    date = format_date(quotation.created_at)
    status = quotation.status.value.upper()
    return DocumentLayout(
        title="QUOTATION",
        number=f"Q-{quotation.id}",
        date=date,
        status=status,
        issuer=issuer,
        header_fields=(
            ("Quotation Number:", f"Q-{quotation.id}"),
            ("Date:", date),
            ("Status:", status),
            ("Prepared by:", issuer),
        ),
        client_lines=_client_lines(client),
        mode=mode,
        columns=_quotation_columns(mode, include_images),
        rows=tuple(rows),
        page_count=cursor.page + 1,
        footer_lines=(
            QUOTATION_DISCLAIMER,
            f"Generated on {format_datetime(generated_at)} by {issuer}",
        ),
        totals=totals,
        totals_block=totals_block,
        include_images=include_images,
        row_limit=QUOTATION_ROW_LIMIT,
    )


def layout_delivery_note(
    note: DeliveryNote,
    client: Optional[Client],
    products: Sequence[Product],
    issuer: str,
    generated_at: Optional[datetime] = None,
) -> DocumentLayout:
    generated_at = generated_at or datetime.now()
    catalog = _catalog(products)

    cursor = Cursor(y=FIRST_ROW_Y, limit=DELIVERY_ROW_LIMIT)
    rows = []
    for item in note.items:
        product = catalog.get(item.product_id)
        page, y = cursor.place(COMPACT_ROW_HEIGHT)
        rows.append(
            PlacedRow(
                cells=(product.name if product else UNKNOWN_PRODUCT, str(item.quantity)),
                page=page,
                y=y,
                height=COMPACT_ROW_HEIGHT,
            )
        )

    notes_block = None
    if note.notes:
        cursor.y += 10
        page, y = cursor.place(NOTES_HEIGHT)
        notes_block = PlacedBlock(page=page, y=y, lines=(("Notes:", note.notes),))

    date = format_date(note.requested_at)
    status = note.status.value.upper()
    return DocumentLayout(
        title="DELIVERY NOTE",
        number=f"DN-{note.id}",
        date=date,
        status=status,
        issuer=issuer,
        header_fields=(
            ("Delivery Note Number:", f"DN-{note.id}"),
            ("Date:", date),
            ("Status:", status),
        ),
        client_lines=_client_lines(client),
        mode=DocumentMode.DELIVERY,
        columns=(
            Column("Product", MARGIN + 5),
            Column("Quantity", 150, "right"),
        ),
        rows=tuple(rows),
        page_count=cursor.page + 1,
        footer_lines=(
            DELIVERY_DISCLAIMER,
            f"Generated on {format_datetime(generated_at)} by {issuer}",
        ),
        notes_block=notes_block,
        signatures=True,
        row_limit=DELIVERY_ROW_LIMIT,
    )
