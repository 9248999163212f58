import os
import sys
import tempfile
import unittest

import aiosqlite

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from store.storage import LocalStorage  # noqa: E402


class LocalStorageTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        # nested directory is created on first use
        self.path = os.path.join(self.temp_dir.name, "data", "test.sqlite")
        self.storage = LocalStorage(self.path, namespace="app")

    def tearDown(self):
        self.temp_dir.cleanup()

    async def test_missing_key_is_none(self):
        self.assertIsNone(await self.storage.get_item("nothing"))
        self.assertTrue(os.path.exists(self.path))

    async def test_set_get_and_overwrite(self):
        await self.storage.set_item("clients", [{"id": "1", "name": "John"}])
        self.assertEqual(
            await self.storage.get_item("clients"), [{"id": "1", "name": "John"}]
        )

        await self.storage.set_item("clients", [])
        self.assertEqual(await self.storage.get_item("clients"), [])

    async def test_keys_are_namespaced(self):
        other = LocalStorage(self.path, namespace="other")
        await self.storage.set_item("users", [1])
        await self.storage.set_item("currentUser", {"id": "1"})
        await other.set_item("users", [2])

        self.assertEqual(await self.storage.keys(), ["currentUser", "users"])
        self.assertEqual(await other.get_item("users"), [2])

        async with aiosqlite.connect(self.path) as conn:
            cur = await conn.execute("SELECT key FROM local_storage ORDER BY key;")
            rows = await cur.fetchall()
            await cur.close()
        self.assertEqual(
            [r[0] for r in rows], ["app:currentUser", "app:users", "other:users"]
        )

    async def test_remove_and_clear(self):
        other = LocalStorage(self.path, namespace="other")
        await self.storage.set_item("a", 1)
        await self.storage.set_item("b", 2)
        await other.set_item("a", 3)

        await self.storage.remove_item("a")
        self.assertIsNone(await self.storage.get_item("a"))
        # removing twice is harmless
        await self.storage.remove_item("a")

        await self.storage.clear()
        self.assertEqual(await self.storage.keys(), [])
        self.assertEqual(await other.get_item("a"), 3)


if __name__ == "__main__":
    unittest.main()
