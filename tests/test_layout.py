import dataclasses
import math
import os
import sys
import unittest
from datetime import datetime
from decimal import Decimal

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from quoting import layout as lay  # noqa: E402
from store import seed  # noqa: E402
from store.models import (  # noqa: E402
    DeliveryItem,
    DeliveryNote,
    Quotation,
    QuotationItem,
    QuotationStatus,
    RequestStatus,
)

STANDARD = Decimal("0.15")
EXEMPT = Decimal("0")
GENERATED = datetime(2024, 5, 1, 9, 30)


def make_quotation(n_items, product_id="1"):
    items = tuple(QuotationItem(product_id, 1, Decimal("10")) for _ in range(n_items))
    return Quotation(
        id="42",
        client_id="1",
        items=items,
        total=Decimal(10 * n_items),
        status=QuotationStatus.DRAFT,
        created_by="1",
        created_at=datetime(2024, 4, 30),
        updated_at=datetime(2024, 4, 30),
    )


def make_note(n_items, notes=""):
    return DeliveryNote(
        id="7",
        client_id="1",
        items=tuple(DeliveryItem("1", i + 1) for i in range(n_items)),
        notes=notes,
        status=RequestStatus.PENDING,
        requested_by="2",
        requested_at=datetime(2024, 4, 30),
    )


def expected_pages(n, height, limit):
    header_offset = lay.FIRST_ROW_Y - lay.TOP_MARGIN
    capacity = limit - lay.TOP_MARGIN
    return max(1, math.ceil((header_offset + n * height) / capacity))


class PaginateTestCase(unittest.TestCase):
    def test_page_count_formula_compact_rows(self):
        for n in range(0, 80):
            placed = lay.paginate([lay.COMPACT_ROW_HEIGHT] * n)
            pages = (placed[-1][0] + 1) if placed else 1
            self.assertEqual(
                pages, expected_pages(n, lay.COMPACT_ROW_HEIGHT, lay.QUOTATION_ROW_LIMIT), n
            )

    def test_page_count_formula_delivery_limit(self):
        for n in range(0, 60):
            placed = lay.paginate([lay.COMPACT_ROW_HEIGHT] * n, limit=lay.DELIVERY_ROW_LIMIT)
            pages = (placed[-1][0] + 1) if placed else 1
            self.assertEqual(
                pages, expected_pages(n, lay.COMPACT_ROW_HEIGHT, lay.DELIVERY_ROW_LIMIT), n
            )

    def test_no_row_crosses_the_limit(self):
        for height in (lay.COMPACT_ROW_HEIGHT, lay.IMAGE_ROW_HEIGHT, 7, 55):
            for page, y in lay.paginate([height] * 40):
                self.assertLessEqual(y + height, lay.QUOTATION_ROW_LIMIT)
                self.assertGreaterEqual(y, lay.TOP_MARGIN if page else lay.FIRST_ROW_Y)

    def test_new_page_starts_at_top_margin(self):
        placed = lay.paginate([lay.COMPACT_ROW_HEIGHT] * 12)
        self.assertEqual(placed[10], (0, 230))
        self.assertEqual(placed[11], (1, lay.TOP_MARGIN))

    def test_first_page_holds_eleven_compact_rows(self):
        placed = lay.paginate([lay.COMPACT_ROW_HEIGHT] * 11)
        self.assertTrue(all(page == 0 for page, _ in placed))

    def test_image_rows_break_earlier(self):
        placed = lay.paginate([lay.IMAGE_ROW_HEIGHT] * 4)
        # 130, 160, 190 fit; 220 + 30 > 240
        self.assertEqual([p for p, _ in placed], [0, 0, 0, 1])


class QuotationLayoutTestCase(unittest.TestCase):
    def setUp(self):
        self.client = seed.initial_clients()[0]
        self.products = seed.initial_products()

    def layout(self, quotation, **kwargs):
        kwargs.setdefault("vat_rate", STANDARD)
        return lay.layout_quotation(
            quotation, self.client, self.products, "Admin User",
            generated_at=GENERATED, **kwargs,
        )

    def test_extended_mode_with_vat(self):
        doc = self.layout(make_quotation(2))
        self.assertIs(doc.mode, lay.DocumentMode.EXTENDED)
        self.assertIn("VAT/Unit", [c.title for c in doc.columns])
        self.assertEqual(doc.rows[0].cells[3], "$1.50")

    def test_base_mode_without_vat(self):
        doc = self.layout(make_quotation(2), vat_rate=EXEMPT)
        self.assertIs(doc.mode, lay.DocumentMode.BASE)
        self.assertNotIn("VAT/Unit", [c.title for c in doc.columns])
        self.assertEqual(doc.totals.vat, 0)
        self.assertEqual(doc.totals_block.lines[1], ("VAT (0%):", "$0.00"))

    def test_totals_block_uses_pricing_engine(self):
        quotation = seed.initial_quotations()[0]
        doc = self.layout(quotation)
        self.assertEqual(
            doc.totals_block.lines,
            (
                ("Subtotal:", "$5,449.93"),
                ("VAT (15%):", "$817.49"),
                ("Total:", "$6,267.42"),
            ),
        )

    def test_header_and_footer(self):
        doc = self.layout(make_quotation(1))
        self.assertEqual(doc.title, "QUOTATION")
        self.assertIn(("Quotation Number:", "Q-42"), doc.header_fields)
        self.assertIn(("Date:", "Apr 30, 2024"), doc.header_fields)
        self.assertIn(("Status:", "DRAFT"), doc.header_fields)
        self.assertEqual(doc.client_lines[0], "Name: John Doe")
        self.assertEqual(doc.footer_lines[1], "Generated on May 01, 2024 9:30 AM by Admin User")

    def test_unknown_product_row_still_priced(self):
        quotation = make_quotation(1, product_id="gone")
        doc = self.layout(quotation)
        self.assertEqual(doc.rows[0].cells[0], lay.UNKNOWN_PRODUCT)
        self.assertEqual(doc.rows[0].cells[-1], "$10.00")
        self.assertEqual(doc.totals.subtotal, Decimal("10"))

    def test_missing_client_placeholder(self):
        doc = lay.layout_quotation(
            make_quotation(1), None, self.products, "Admin User",
            vat_rate=STANDARD, generated_at=GENERATED,
        )
        self.assertEqual(doc.client_lines, ("Name: Unknown Client",))

    def test_empty_quotation_has_zero_totals(self):
        doc = self.layout(make_quotation(0))
        self.assertEqual(doc.rows, ())
        self.assertEqual(doc.page_count, 1)
        self.assertEqual(doc.totals_block.lines[-1], ("Total:", "$0.00"))

    def test_totals_move_to_new_page_when_they_do_not_fit(self):
        # eleven rows fill page one down to 240
        doc = self.layout(make_quotation(11))
        self.assertEqual(doc.rows[-1].page, 0)
        self.assertEqual(doc.totals_block.page, 1)
        self.assertEqual(doc.totals_block.y, lay.TOP_MARGIN)
        self.assertEqual(doc.page_count, 2)

    def test_totals_stay_when_they_fit(self):
        doc = self.layout(make_quotation(3))
        self.assertEqual(doc.totals_block.page, 0)
        self.assertLessEqual(doc.totals_block.y + lay.TOTALS_HEIGHT, lay.QUOTATION_ROW_LIMIT)

    def test_rows_never_split(self):
        for include_images in (False, True):
            doc = self.layout(make_quotation(25), include_images=include_images)
            for row in doc.rows:
                self.assertLessEqual(row.y + row.height, lay.QUOTATION_ROW_LIMIT)
            last_row_page = doc.rows[-1].page
            self.assertGreaterEqual(doc.page_count, last_row_page + 1)

    def test_row_pages_follow_formula(self):
        for n in (1, 11, 12, 33, 34, 50):
            doc = self.layout(make_quotation(n))
            self.assertEqual(
                doc.rows[-1].page + 1,
                expected_pages(n, lay.COMPACT_ROW_HEIGHT, lay.QUOTATION_ROW_LIMIT),
            )

    def test_images_taller_rows_and_urls(self):
        doc = self.layout(make_quotation(2), include_images=True)
        self.assertTrue(all(r.height == lay.IMAGE_ROW_HEIGHT for r in doc.rows))
        # seed products carry no image
        self.assertTrue(all(r.image_url is None for r in doc.rows))
        self.assertEqual(doc.columns[0].x, lay.MARGIN + 5 + lay.THUMBNAIL_SIZE + 3)

    def test_image_url_only_when_requested(self):
        products = [
            dataclasses.replace(p, image_url="/tmp/thumb.png") for p in self.products
        ]
        for include_images, expected in ((False, None), (True, "/tmp/thumb.png")):
            doc = lay.layout_quotation(
                make_quotation(1), self.client, products, "Admin User",
                include_images=include_images, vat_rate=STANDARD, generated_at=GENERATED,
            )
            self.assertEqual(doc.rows[0].image_url, expected)

    def test_layout_is_idempotent(self):
        quotation = seed.initial_quotations()[1]
        first = self.layout(quotation, include_images=True)
        second = self.layout(quotation, include_images=True)
        self.assertEqual(first, second)
        self.assertEqual(len(first.rows), len(second.rows))
        self.assertEqual(first.page_count, second.page_count)
        self.assertEqual(first.totals, second.totals)


class DeliveryLayoutTestCase(unittest.TestCase):
    def setUp(self):
        self.client = seed.initial_clients()[1]
        self.products = seed.initial_products()

    def layout(self, note):
        return lay.layout_delivery_note(
            note, self.client, self.products, "Jane Manager", generated_at=GENERATED
        )

    def test_delivery_mode_columns_and_signatures(self):
        doc = self.layout(make_note(2, notes="Leave at reception"))
        self.assertIs(doc.mode, lay.DocumentMode.DELIVERY)
        self.assertEqual([c.title for c in doc.columns], ["Product", "Quantity"])
        self.assertTrue(doc.signatures)
        self.assertIsNone(doc.totals_block)
        self.assertEqual(doc.rows[1].cells, ("Industrial Washing Machine", "2"))
        self.assertEqual(doc.notes_block.lines, (("Notes:", "Leave at reception"),))
        self.assertEqual(doc.number, "DN-7")

    def test_rows_stop_above_signature_area(self):
        doc = self.layout(make_note(30))
        for row in doc.rows:
            self.assertLessEqual(row.y + row.height, lay.DELIVERY_ROW_LIMIT)
        self.assertEqual(
            doc.rows[-1].page + 1,
            expected_pages(30, lay.COMPACT_ROW_HEIGHT, lay.DELIVERY_ROW_LIMIT),
        )

    def test_no_notes_block_without_notes(self):
        doc = self.layout(make_note(1))
        self.assertIsNone(doc.notes_block)


if __name__ == "__main__":
    unittest.main()
