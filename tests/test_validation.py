import os
import sys
import unittest
from decimal import Decimal

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from store.models import (  # noqa: E402
    DeliveryItem,
    DocumentType,
    ProductStatus,
    QuotationItem,
    QuotationStatus,
    Role,
)
from utils import validation  # noqa: E402
from utils.errors import ValidationError  # noqa: E402


class ValidationTestCase(unittest.TestCase):
    def assertInvalid(self, field, func, *args, **kwargs):
        with self.assertRaises(ValidationError) as ctx:
            func(*args, **kwargs)
        self.assertEqual(ctx.exception.field, field)
        return ctx.exception

    def test_client(self):
        cleaned = validation.validate_client(
            " Ada ", "Lovelace", "Engines", " 555-0100 ", "ada@engines.test"
        )
        self.assertEqual(cleaned["name"], "Ada")
        self.assertEqual(cleaned["phone"], "555-0100")

        args = ["Ada", "Lovelace", "Engines", "555-0100", "ada@engines.test"]
        for index, value, field in (
            (0, "  ", "name"),
            (0, "A", "name"),
            (1, "L ", "surname"),
            (2, "", "company"),
            (3, "", "phone"),
            (3, "5551", "phone"),
            (4, "", "email"),
            (4, "not-an-email", "email"),
            (4, "ada@engines", "email"),
            (4, "ada @engines.test", "email"),
        ):
            bad = list(args)
            bad[index] = value
            self.assertInvalid(field, validation.validate_client, *bad)

        err = self.assertInvalid(
            "name", validation.validate_client, "A", "Lovelace", "E", "555-0100", "a@b.co"
        )
        self.assertEqual(err.message, "Name must be at least 2 characters")

    def test_product(self):
        cleaned = validation.validate_product(
            "Mop", " Flat floor mop ", "9.5", "Cleaning", "Floor, mop, floor", "3",
            "in-stock", "  ",
        )
        self.assertEqual(cleaned["description"], "Flat floor mop")
        self.assertEqual(cleaned["price"], Decimal("9.5"))
        self.assertEqual(cleaned["stock"], 3)
        self.assertIs(cleaned["status"], ProductStatus.IN_STOCK)
        self.assertEqual(cleaned["tags"], ("floor", "mop"))
        self.assertIsNone(cleaned["image_url"])

        args = ["Mop", "Flat floor mop", "9.5", "Cleaning", "", "3", "in-stock"]
        for index, value, field in (
            (2, "abc", "price"),
            (2, "-1", "price"),
            (2, "nan", "price"),
            (2, Decimal("NaN"), "price"),
            (2, Decimal("Infinity"), "price"),
            (5, "2.5", "stock"),
            (5, "-4", "stock"),
            (6, "sold", "status"),
            (0, "", "name"),
            (0, "M", "name"),
            (1, "", "description"),
            (1, "Short mop", "description"),
            (3, " ", "category"),
        ):
            bad = list(args)
            bad[index] = value
            self.assertInvalid(field, validation.validate_product, *bad)

        err = self.assertInvalid(
            "description", validation.validate_product, "Mop", "mop", "1", "C", "", "1",
            "in-stock",
        )
        self.assertEqual(err.message, "Description must be at least 10 characters")

    def test_quotation_item(self):
        item = validation.validate_quotation_item("1", "2", "100", "", index=0)
        self.assertEqual(item, QuotationItem("1", 2, Decimal("100"), None))
        self.assertEqual(
            validation.validate_quotation_item("1", 1, "5", "12.5").discount,
            Decimal("12.5"),
        )

        err = self.assertInvalid(
            "items.2.quantity", validation.validate_quotation_item, "1", "0", "10", index=2
        )
        self.assertEqual(err.message, "Quantity must be at least 1")
        self.assertInvalid("items.0.price", validation.validate_quotation_item, "1", 1, "0")
        self.assertInvalid(
            "items.1.discount", validation.validate_quotation_item, "1", 1, "5", "101", index=1
        )
        self.assertInvalid(
            "items.0.discount", validation.validate_quotation_item, "1", 1, "5", "-1"
        )
        self.assertInvalid(
            "items.0.discount", validation.validate_quotation_item, "1", 1, "5",
            Decimal("NaN"),
        )
        self.assertInvalid("items.0.product_id", validation.validate_quotation_item, "", 1, "5")

    def test_quotation(self):
        item = QuotationItem("1", 1, Decimal("5"))
        client_id, items, status = validation.validate_quotation("1", [item], "sent")
        self.assertEqual((client_id, items), ("1", (item,)))
        self.assertIs(status, QuotationStatus.SENT)

        self.assertInvalid("client_id", validation.validate_quotation, "", [item], "draft")
        self.assertInvalid("items", validation.validate_quotation, "1", [], "draft")
        self.assertInvalid("status", validation.validate_quotation, "1", [item], "lost")

    def test_user(self):
        cleaned = validation.validate_user("sam", "secret", "Sam S", "sales")
        self.assertIs(cleaned["role"], Role.SALES)

        self.assertInvalid("username", validation.validate_user, "sa", "secret", "Sam", "sales")
        self.assertInvalid("password", validation.validate_user, "sam", "short", "Sam", "sales")
        self.assertInvalid("full_name", validation.validate_user, "sam", "secret", "S", "sales")
        self.assertInvalid("role", validation.validate_user, "sam", "secret", "Sam", "boss")

        # editing without a new password keeps the old one
        kept = validation.validate_user("sam", "", "Sam S", "admin", require_password=False)
        self.assertIsNone(kept["password"])
        self.assertInvalid(
            "password", validation.validate_user, "sam", "abc", "Sam S", "admin",
            require_password=False,
        )

    def test_requests(self):
        self.assertEqual(validation.validate_sample_request("1", ["1", "", "3"]), ["1", "3"])
        self.assertInvalid("product_ids", validation.validate_sample_request, "1", [])
        self.assertInvalid("client_id", validation.validate_sample_request, "", ["1"])

        items = [DeliveryItem("1", 2)]
        self.assertEqual(validation.validate_delivery_note("1", items), items)
        self.assertInvalid("items", validation.validate_delivery_note, "1", [])
        self.assertInvalid(
            "quantity", validation.validate_delivery_note, "1", [DeliveryItem("1", 0)]
        )

    def test_document(self):
        cleaned = validation.validate_document("1", "sheet.pdf", "SDS")
        self.assertIs(cleaned["type"], DocumentType.SDS)
        self.assertInvalid("type", validation.validate_document, "1", "sheet.pdf", "PDF")
        self.assertInvalid("filename", validation.validate_document, "1", "", "TDS")


if __name__ == "__main__":
    unittest.main()
