import os
import sys
import tempfile
import unittest
from datetime import datetime
from decimal import Decimal

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from quoting.pricing import calculate_subtotal  # noqa: E402
from store.data_store import (  # noqa: E402
    UNKNOWN_CLIENT,
    UNKNOWN_PRODUCT,
    DataStore,
    can_print_delivery_note,
    merge_delivery_item,
)
from store.models import (  # noqa: E402
    ClientUpdate,
    DeliveryItem,
    DocumentType,
    ProductStatus,
    ProductUpdate,
    QuotationItem,
    QuotationStatus,
    QuotationUpdate,
    RequestStatus,
)
from store.storage import LocalStorage  # noqa: E402
from utils.errors import InvalidTransitionError  # noqa: E402

NOW = datetime(2024, 5, 1, 9, 30)


class DataStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.storage = LocalStorage(
            os.path.join(self.temp_dir.name, "test.sqlite"), namespace="test"
        )
        self.store = DataStore(self.storage, clock=lambda: NOW)

    def tearDown(self):
        self.temp_dir.cleanup()

    # ---------- Clients ----------

    async def test_client_crud(self):
        client = await self.store.add_client(
            "Ada", "Lovelace", "Engines Ltd", "555-0100", "ada@engines.test"
        )
        self.assertEqual(client.created_at, NOW)
        self.assertIn(client, self.store.clients)

        updated = await self.store.update_client(client.id, ClientUpdate(phone="555-0199"))
        self.assertEqual(updated.phone, "555-0199")
        self.assertEqual(updated.company, "Engines Ltd")
        self.assertIsNone(await self.store.update_client("nope", ClientUpdate(name="x")))

        self.assertEqual([c.id for c in self.store.search_clients("engines")], [client.id])
        self.assertEqual(len(self.store.search_clients("")), 4)

        self.assertTrue(await self.store.delete_client(client.id))
        self.assertFalse(await self.store.delete_client(client.id))

    async def test_delete_referenced_client_keeps_quotation(self):
        self.assertTrue(await self.store.delete_client("1"))

        quotation = self.store.get_quotation("1")
        self.assertIsNotNone(quotation)
        self.assertEqual(self.store.client_label(quotation.client_id), UNKNOWN_CLIENT)
        # orphaned quotations only show for an empty query
        self.assertNotIn(quotation, self.store.search_quotations("John"))
        self.assertIn(quotation, self.store.search_quotations(""))

    async def test_ids_are_unique(self):
        first = await self.store.add_client("A", "B", "C", "", "")
        second = await self.store.add_client("A", "B", "C", "", "")
        self.assertNotEqual(first.id, second.id)

    # ---------- Products ----------

    async def test_product_search(self):
        everything = self.store.search_products("")
        self.assertEqual(len(everything), 4)
        self.assertEqual(
            {p.id for p in self.store.search_products("clean")}, {"1", "2", "3", "4"}
        )
        self.assertEqual(
            {p.id for p in self.store.search_products("CLEAN")}, {"1", "2", "3", "4"}
        )
        self.assertEqual([p.id for p in self.store.search_products("kitchen")], ["4"])
        self.assertEqual(
            {p.id for p in self.store.search_products("vacuum detergent")}, {"2", "3"}
        )
        self.assertEqual(self.store.search_products("zzz"), [])

    async def test_stock_and_status_are_independent(self):
        updated = await self.store.update_product("2", ProductUpdate(stock=30))
        self.assertEqual(updated.stock, 30)
        self.assertIs(updated.status, ProductStatus.OUT_OF_STOCK)

        updated = await self.store.update_product(
            "1", ProductUpdate(status=ProductStatus.ON_COMMAND)
        )
        self.assertEqual(updated.stock, 12)

    async def test_product_tags_and_image(self):
        product = await self.store.add_product(
            "Mop", "Flat mop", Decimal("9.50"), "Cleaning", ["Floor", "MOP"], 3,
            ProductStatus.IN_STOCK, image_url="/tmp/mop.png",
        )
        self.assertEqual(product.tags, ("floor", "mop"))
        self.assertEqual(product.image_url, "/tmp/mop.png")

        cleared = await self.store.update_product(product.id, ProductUpdate(image_url=""))
        self.assertIsNone(cleared.image_url)

    async def test_deleted_product_name_fallback(self):
        await self.store.delete_product("3")
        self.assertEqual(self.store.product_name("3"), UNKNOWN_PRODUCT)
        self.assertEqual(self.store.product_name("1"), "Industrial Washing Machine")

    # ---------- Quotations ----------

    async def test_quotation_lifecycle(self):
        items = [QuotationItem("1", 1, Decimal("2499.99"), Decimal("10"))]
        quotation = await self.store.add_quotation(
            "3", items, calculate_subtotal(items), QuotationStatus.DRAFT, "2"
        )
        self.assertEqual(quotation.total, Decimal("2249.991"))
        self.assertEqual(quotation.items, tuple(items))
        self.assertEqual(quotation.created_at, quotation.updated_at)

        sent = await self.store.update_quotation(
            quotation.id, QuotationUpdate(status=QuotationStatus.SENT)
        )
        self.assertIs(sent.status, QuotationStatus.SENT)
        self.assertEqual(sent.items, quotation.items)

        self.assertEqual(
            [q.id for q in self.store.search_quotations("robert")], [quotation.id]
        )
        self.assertEqual([q.id for q in self.store.search_quotations("XYZ")], ["2"])

        self.assertTrue(await self.store.delete_quotation(quotation.id))
        self.assertIsNone(self.store.get_quotation(quotation.id))

    async def test_dashboard_stats(self):
        stats = self.store.get_dashboard_stats()
        self.assertEqual(stats.total_quotations, 2)
        self.assertEqual(stats.total_clients, 3)
        self.assertEqual(stats.total_products, 4)
        # one sent, one accepted
        self.assertEqual(stats.conversion_rate, 50)
        self.assertEqual([q.id for q in stats.recent_quotations], ["2", "1"])
        self.assertEqual(
            stats.status_counts,
            {QuotationStatus.SENT: 1, QuotationStatus.ACCEPTED: 1},
        )

    async def test_dashboard_without_sent_quotations(self):
        store = DataStore(with_seed=False)
        stats = store.get_dashboard_stats()
        self.assertEqual(stats.conversion_rate, 0)
        self.assertEqual(stats.recent_quotations, ())

        await store.add_quotation("1", [], Decimal("0"), QuotationStatus.DRAFT, "1")
        self.assertEqual(store.get_dashboard_stats().conversion_rate, 0)

    async def test_conversion_rate_rounds_halves_up(self):
        store = DataStore(with_seed=False)
        await store.add_quotation("1", [], Decimal("0"), QuotationStatus.ACCEPTED, "1")
        for _ in range(7):
            await store.add_quotation("1", [], Decimal("0"), QuotationStatus.SENT, "1")
        # 1 of 8 is 12.5%
        self.assertEqual(store.get_dashboard_stats().conversion_rate, 13)

        # drafts do not count
        await store.add_quotation("1", [], Decimal("0"), QuotationStatus.DRAFT, "1")
        self.assertEqual(store.get_dashboard_stats().conversion_rate, 13)

    # ---------- Samples & delivery notes ----------

    async def test_sample_request_transitions(self):
        request = await self.store.add_sample_request("1", ["1", "3"], "trial", "2")
        self.assertIs(request.status, RequestStatus.PENDING)

        approved = await self.store.approve_sample_request(request.id, "3")
        self.assertIs(approved.status, RequestStatus.APPROVED)
        self.assertEqual(approved.approved_by, "3")
        self.assertEqual(approved.approved_at, NOW)

        with self.assertRaises(InvalidTransitionError):
            await self.store.reject_sample_request(request.id)

        delivered = await self.store.mark_sample_delivered(request.id)
        self.assertIs(delivered.status, RequestStatus.DELIVERED)
        self.assertIsNone(await self.store.approve_sample_request("nope", "3"))

    async def test_rejected_request_cannot_be_delivered(self):
        request = await self.store.add_sample_request("1", ["1"], "", "2")
        await self.store.reject_sample_request(request.id)
        with self.assertRaises(InvalidTransitionError):
            await self.store.mark_sample_delivered(request.id)
        with self.assertRaises(InvalidTransitionError):
            await self.store.approve_sample_request(request.id, "1")

    async def test_delivery_note_transitions(self):
        note = await self.store.add_delivery_note(
            "2", [DeliveryItem("1", 2)], "dock 4", "2"
        )
        with self.assertRaises(InvalidTransitionError):
            await self.store.mark_delivery_note_delivered(note.id)

        await self.store.approve_delivery_note(note.id, "1")
        delivered = await self.store.mark_delivery_note_delivered(note.id)
        self.assertIs(delivered.status, RequestStatus.DELIVERED)
        self.assertEqual(delivered.approved_by, "1")

        self.assertEqual(len(self.store.search_delivery_notes("jane")), 1)
        self.assertEqual(self.store.search_delivery_notes("robert"), [])

    async def test_only_approved_notes_print(self):
        pending = await self.store.add_delivery_note("1", [DeliveryItem("1", 1)], "", "2")
        rejected = await self.store.add_delivery_note("1", [DeliveryItem("1", 1)], "", "2")
        approved = await self.store.add_delivery_note("1", [DeliveryItem("1", 1)], "", "2")
        await self.store.reject_delivery_note(rejected.id)
        await self.store.approve_delivery_note(approved.id, "3")

        get = self.store.get_delivery_note
        self.assertFalse(can_print_delivery_note(get(pending.id)))
        self.assertFalse(can_print_delivery_note(get(rejected.id)))
        self.assertTrue(can_print_delivery_note(get(approved.id)))

        await self.store.mark_delivery_note_delivered(approved.id)
        self.assertTrue(can_print_delivery_note(get(approved.id)))

    def test_merge_delivery_item(self):
        items = merge_delivery_item([], "1", 2)
        items = merge_delivery_item(items, "3", 1)
        items = merge_delivery_item(items, "1", 5)
        self.assertEqual(items, [DeliveryItem("1", 7), DeliveryItem("3", 1)])

    # ---------- Documents ----------

    async def test_documents(self):
        tds = await self.store.add_document("1", DocumentType.TDS, "washer-tds.pdf")
        await self.store.add_document("4", DocumentType.SDS, "dish-sds.pdf")

        self.assertEqual(tds.file_url, "#")
        self.assertEqual([d.id for d in self.store.search_documents("washing")], [tds.id])
        self.assertEqual(len(self.store.search_documents("sds")), 1)
        self.assertEqual(len(self.store.search_documents("")), 2)

        self.assertTrue(await self.store.delete_document(tds.id))
        self.assertEqual(len(self.store.documents), 1)

    # ---------- Persistence ----------

    async def test_collections_survive_reload(self):
        client = await self.store.add_client("Ada", "Lovelace", "Engines", "", "")
        await self.store.add_sample_request(client.id, ["2"], "", "2")
        await self.store.delete_product("4")

        reloaded = DataStore(self.storage, clock=lambda: NOW)
        await reloaded.load()

        self.assertEqual(reloaded.get_client(client.id), client)
        self.assertEqual(len(reloaded.sample_requests), 1)
        self.assertIsNone(reloaded.get_product("4"))
        # never written, so the seed stays
        self.assertEqual(reloaded.quotations, self.store.quotations)

    async def test_load_without_storage_keeps_seed(self):
        store = DataStore(None)
        await store.load()
        self.assertEqual(len(store.products), 4)


if __name__ == "__main__":
    unittest.main()
