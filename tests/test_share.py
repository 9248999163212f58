import dataclasses
import os
import sys
import unittest
from urllib.parse import parse_qs, urlsplit

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from quoting.share import build_share_links  # noqa: E402
from store import seed  # noqa: E402


class ShareLinksTestCase(unittest.TestCase):
    def setUp(self):
        self.client = seed.initial_clients()[2]
        self.quotation = seed.initial_quotations()[0]

    def test_message_text(self):
        links = build_share_links(self.quotation, self.client, "John Sales", "Acme")
        self.assertEqual(links.subject, "Quotation Q-1 from Acme for Robert Johnson")
        self.assertTrue(links.body.startswith("Dear Robert,\n\n"))
        self.assertTrue(links.body.endswith("Regards,\nJohn Sales\nAcme"))

    def test_mailto_link(self):
        links = build_share_links(
            self.quotation, self.client, "John Sales", "Smith & Sons"
        )
        parts = urlsplit(links.mailto)
        self.assertEqual(parts.scheme, "mailto")
        self.assertEqual(parts.path, "robert@johnson.com")

        query = parse_qs(parts.query)
        self.assertEqual(query["subject"], [links.subject])
        self.assertEqual(query["body"], [links.body])
        # "&" in the company must not split the query
        self.assertNotIn("&", links.mailto.split("?", 1)[1].replace("&body=", ""))

    def test_whatsapp_uses_digits_only(self):
        client = dataclasses.replace(self.client, phone="+1 (122) 334-4455")
        links = build_share_links(self.quotation, client, "John Sales", "Acme")
        self.assertTrue(links.whatsapp.startswith("https://wa.me/11223344455?text="))
        self.assertEqual(parse_qs(urlsplit(links.whatsapp).query)["text"], [links.body])

    def test_missing_contact_details(self):
        client = dataclasses.replace(self.client, phone=" - ", email="")
        links = build_share_links(self.quotation, client, "John Sales")
        self.assertIsNone(links.mailto)
        self.assertIsNone(links.whatsapp)
        self.assertIn("Robert Johnson", links.subject)


if __name__ == "__main__":
    unittest.main()
