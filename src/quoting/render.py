"""
PDF output for quotations and delivery notes.

Draws a DocumentLayout onto a reportlab canvas. Layout positions are
millimetres from the top of the page; reportlab measures points from the
bottom, so every y goes through PdfWriter._y.
"""

from __future__ import annotations

import base64
import io
import os
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from quoting import layout as lay
from quoting.layout import DocumentLayout, PlacedRow
from store.models import Client, DeliveryNote, Product, Quotation
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
HEADER_FILL = colors.HexColor("#E2E8F0")
RULE = colors.HexColor("#94A3B8")
MUTED = colors.HexColor("#64748B")


@dataclass(frozen=True)
class RenderedDocument:
    content: bytes
    filename: str
    layout: DocumentLayout
    image_failures: Tuple[str, ...] = ()


def load_image(url: str) -> ImageReader:
    """
    Open a product image from a local path or a base64 data: URI.
    Remote URLs are refused; the renderer never goes to the network.
    """
    if url.startswith("data:"):
        header, _, payload = url.partition(",")
        if ";base64" not in header:
            raise ValueError("only base64 data URIs are supported")
        reader = ImageReader(io.BytesIO(base64.b64decode(payload, validate=True)))
    else:
        scheme = urlparse(url).scheme
        if scheme in ("http", "https"):
            raise ValueError("remote images are not fetched")
        path = url[len("file://"):] if scheme == "file" else url
        if not os.path.isfile(path):
            raise FileNotFoundError(path)
        reader = ImageReader(path)
    reader.getSize()  # forces a decode so corrupt data fails here
    return reader


class PdfWriter:
    """Thin helper over a reportlab canvas working in top-down millimetres."""

    def __init__(self, title: str):
        self.buffer = io.BytesIO()
        self.c = canvas.Canvas(self.buffer, pagesize=A4, invariant=1)
        self.c.setTitle(title)
        self.c.setAuthor(config.COMPANY_NAME)
        self.width, self.height = A4

    def _y(self, y: float) -> float:
        return self.height - y * mm

    def text(self, value: str, x: float, y: float, size: int = 10, bold=False,
             align="left", color=colors.black, max_width: Optional[float] = None):
        font = FONT_BOLD if bold else FONT
        self.c.saveState()
        self.c.setFont(font, size)
        self.c.setFillColor(color)
        if max_width:
            while self.c.stringWidth(value, font, size) > max_width * mm and len(value) > 3:
                value = value[:-4] + "..."
        if align == "right":
            self.c.drawRightString(x * mm, self._y(y), value)
        elif align == "center":
            self.c.drawCentredString(x * mm, self._y(y), value)
        else:
            self.c.drawString(x * mm, self._y(y), value)
        self.c.restoreState()

    def rule(self, x1: float, y: float, x2: float, color=RULE, width=0.5):
        self.c.saveState()
        self.c.setStrokeColor(color)
        self.c.setLineWidth(width)
        self.c.line(x1 * mm, self._y(y), x2 * mm, self._y(y))
        self.c.restoreState()

    def band(self, x: float, y: float, w: float, h: float, fill=HEADER_FILL):
        self.c.saveState()
        self.c.setFillColor(fill)
        self.c.rect(x * mm, self._y(y + h), w * mm, h * mm, stroke=0, fill=1)
        self.c.restoreState()

    def image(self, reader: ImageReader, x: float, y: float, size: float):
        self.c.drawImage(
            reader, x * mm, self._y(y + size), width=size * mm, height=size * mm,
            preserveAspectRatio=True, anchor="c", mask="auto",
        )

    def new_page(self):
        self.c.showPage()

    def finish(self) -> bytes:
        self.c.save()
        return self.buffer.getvalue()


def _draw_letterhead(pdf: PdfWriter, doc: DocumentLayout):
    right = lay.PAGE_WIDTH - lay.MARGIN
    pdf.text(doc.title, lay.MARGIN, 25, size=20, bold=True)
    pdf.text(config.COMPANY_NAME, right, 20, size=12, bold=True, align="right")
    y = 26
    for line in (*config.COMPANY_ADDRESS_LINES, config.COMPANY_PHONE, config.COMPANY_EMAIL):
        pdf.text(line, right, y, size=9, align="right", color=MUTED)
        y += 5

    y = 50
    for label, value in doc.header_fields:
        pdf.text(label, lay.MARGIN, y, bold=True)
        pdf.text(value, lay.MARGIN + 45, y)
        y += 6

    pdf.rule(lay.MARGIN, 78, right)
    bill_label = "Deliver To:" if doc.mode is lay.DocumentMode.DELIVERY else "Bill To:"
    pdf.text(bill_label, lay.MARGIN, 86, size=11, bold=True)
    y = 93
    for line in doc.client_lines:
        pdf.text(line, lay.MARGIN, y)
        y += 6


def _draw_table_header(pdf: PdfWriter, doc: DocumentLayout):
    pdf.band(lay.MARGIN, lay.TABLE_TOP, lay.PAGE_WIDTH - 2 * lay.MARGIN, lay.TABLE_HEADER_HEIGHT)
    baseline = lay.TABLE_TOP + 7
    if doc.include_images:
        pdf.text("Image", lay.MARGIN + 2, baseline, bold=True)
    for column in doc.columns:
        pdf.text(column.title, column.x, baseline, bold=True, align=column.align)


def _draw_row(pdf: PdfWriter, doc: DocumentLayout, row: PlacedRow, failures: List[str]):
    baseline = row.y + row.height / 2 + 2
    if row.image_url:
        try:
            reader = load_image(row.image_url)
            pdf.image(reader, lay.MARGIN + 2, row.y + (row.height - lay.THUMBNAIL_SIZE) / 2,
                      lay.THUMBNAIL_SIZE)
        except Exception as exc:
            _logger.warning(f"Could not draw image for {row.cells[0]}: {exc}")
            failures.append(f"{row.cells[0]}: {exc}")
    name_width = doc.columns[1].x - doc.columns[0].x - 16
    for column, value in zip(doc.columns, row.cells):
        width = name_width if column is doc.columns[0] else None
        pdf.text(value, column.x, baseline, align=column.align, max_width=width)
    pdf.rule(lay.MARGIN, row.y + row.height, lay.PAGE_WIDTH - lay.MARGIN, color=HEADER_FILL)


def _draw_totals(pdf: PdfWriter, doc: DocumentLayout):
    block = doc.totals_block
    right = lay.PAGE_WIDTH - lay.MARGIN - 2
    pdf.rule(120, block.y, lay.PAGE_WIDTH - lay.MARGIN)
    y = block.y + 10
    for index, (label, value) in enumerate(block.lines):
        last = index == len(block.lines) - 1
        if last:
            pdf.rule(120, y - 5, lay.PAGE_WIDTH - lay.MARGIN)
            y += 2
        pdf.text(label, 150, y, size=12 if last else 10, bold=last, align="right")
        pdf.text(value, right, y, size=12 if last else 10, bold=last, align="right")
        y += 7


def _draw_notes(pdf: PdfWriter, doc: DocumentLayout):
    block = doc.notes_block
    label, value = block.lines[0]
    pdf.text(label, lay.MARGIN, block.y + 6, bold=True)
    pdf.text(value, lay.MARGIN, block.y + 12, max_width=lay.PAGE_WIDTH - 2 * lay.MARGIN)


def _draw_signatures(pdf: PdfWriter):
    left = lay.MARGIN
    right = lay.PAGE_WIDTH - lay.MARGIN - lay.SIGNATURE_WIDTH
    for x, label in zip((left, right), lay.SIGNATURE_LABELS):
        pdf.rule(x, lay.SIGNATURE_Y, x + lay.SIGNATURE_WIDTH, color=colors.black)
        pdf.text(label, x, lay.SIGNATURE_Y + 5, size=9)
        pdf.text("Date:", x, lay.SIGNATURE_Y + 11, size=9)


def _draw_footer(pdf: PdfWriter, doc: DocumentLayout, page: int):
    center = lay.PAGE_WIDTH / 2
    pdf.rule(lay.MARGIN, lay.FOOTER_Y, lay.PAGE_WIDTH - lay.MARGIN)
    y = lay.FOOTER_Y + 6
    for line in doc.footer_lines:
        pdf.text(line, center, y, size=8, align="center", color=MUTED)
        y += 5
    pdf.text(
        f"{config.COMPANY_NAME} | {config.COMPANY_PHONE} | {config.COMPANY_EMAIL}",
        center, y, size=8, align="center", color=MUTED,
    )
    pdf.text(f"Page {page + 1} of {doc.page_count}", center, 287, size=8, align="center")


def draw_document(doc: DocumentLayout) -> Tuple[bytes, Tuple[str, ...]]:
    """Render a layout to PDF bytes. Returns the bytes and any image failures."""
    pdf = PdfWriter(f"{doc.title.title()} {doc.number}")
    failures: List[str] = []
    last = doc.page_count - 1
    for page in range(doc.page_count):
        if page:
            pdf.new_page()
        else:
            _draw_letterhead(pdf, doc)
            _draw_table_header(pdf, doc)
        for row in doc.rows_on_page(page):
            _draw_row(pdf, doc, row, failures)
        if doc.totals_block and doc.totals_block.page == page:
            _draw_totals(pdf, doc)
        if doc.notes_block and doc.notes_block.page == page:
            _draw_notes(pdf, doc)
        if doc.signatures and page == last:
            _draw_signatures(pdf)
        _draw_footer(pdf, doc, page)
    return pdf.finish(), tuple(failures)


def render_quotation(
    quotation: Quotation,
    client: Optional[Client],
    products: Sequence[Product],
    issuer: str,
    include_images: bool = False,
    vat_rate: Decimal = config.VAT_RATE,
    generated_at: Optional[datetime] = None,
) -> RenderedDocument:
    doc = lay.layout_quotation(
        quotation, client, products, issuer,
        include_images=include_images, vat_rate=vat_rate, generated_at=generated_at,
    )
    content, failures = draw_document(doc)
    _logger.info(f"Rendered quotation {quotation.id} ({doc.page_count} page(s))")
    return RenderedDocument(content, f"Quotation-{quotation.id}.pdf", doc, failures)


def render_delivery_note(
    note: DeliveryNote,
    client: Optional[Client],
    products: Sequence[Product],
    issuer: str,
    generated_at: Optional[datetime] = None,
) -> RenderedDocument:
    doc = lay.layout_delivery_note(note, client, products, issuer, generated_at=generated_at)
    content, failures = draw_document(doc)
    _logger.info(f"Rendered delivery note {note.id} ({doc.page_count} page(s))")
    return RenderedDocument(content, f"DeliveryNote-{note.id}.pdf", doc, failures)


def save_document(document: RenderedDocument, directory: str = config.EXPORT_DIR) -> str:
    """Write the PDF under directory and return its path."""
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, document.filename)
    with open(path, "wb") as f:
        f.write(document.content)
    _logger.info(f"Saved {path}")
    return path
