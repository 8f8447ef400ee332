import os
import sys
import tempfile
import unittest
from unittest import mock

import aiosqlite
import jwt

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import database as db_database  # noqa: E402
from db import storage  # noqa: E402
from utils.session import SessionStore  # noqa: E402
from utils.token import ROLE_MERCHANT, Identity  # noqa: E402


def make_token(user_id=42, user_type=ROLE_MERCHANT) -> str:
    return jwt.encode(
        {"user_id": user_id, "user_type": user_type}, "secret", algorithm="HS256"
    )


class StorageTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        # Point the storage file to a temporary location and force re-initialization
        self.temp_dir = tempfile.TemporaryDirectory()
        db_database.DB_PATH = os.path.join(self.temp_dir.name, "nested", "s.sqlite")
        db_database._initialized = False

    def tearDown(self):
        self.temp_dir.cleanup()


class LocalStorageTest(StorageTestCase):
    async def test_get_set_remove(self):
        self.assertIsNone(await storage.get_item("missing"))

        await storage.set_item("k", "v1")
        self.assertEqual(await storage.get_item("k"), "v1")

        await storage.set_item("k", "v2")
        self.assertEqual(await storage.get_item("k"), "v2")

        await storage.set_item("other", 5)
        self.assertEqual(await storage.get_item("other"), "5")

        await storage.remove_items("k", "other", "never-set")
        self.assertIsNone(await storage.get_item("k"))
        self.assertIsNone(await storage.get_item("other"))

    async def test_remove_nothing(self):
        await storage.set_item("k", "v")
        await storage.remove_items()
        self.assertEqual(await storage.get_item("k"), "v")


class SessionStoreTest(StorageTestCase):
    async def asyncSetUp(self):
        self.session = SessionStore()
        self.calls = []
        self.unsubscribe = self.session.subscribe(self.calls.append)

    async def test_initially_logged_out(self):
        self.assertFalse(await self.session.refresh())
        self.assertFalse(self.session.is_logged_in())
        self.assertIsNone(self.session.identity())
        self.assertEqual(self.calls, [False])

    async def test_refresh_always_broadcasts(self):
        await self.session.refresh()
        await self.session.refresh()
        self.assertEqual(self.calls, [False, False])

    async def test_sign_in_stores_token_and_hints(self):
        token = make_token(42, ROLE_MERCHANT)
        identity = await self.session.sign_in(token)

        self.assertEqual(identity, Identity(42, ROLE_MERCHANT))
        self.assertTrue(self.session.is_logged_in())
        self.assertEqual(self.session.token, token)
        self.assertEqual(await storage.get_item(storage.TOKEN_KEY), token)
        self.assertEqual(await storage.get_item(storage.USER_ID_KEY), "42")
        self.assertEqual(await storage.get_item(storage.USER_TYPE_KEY), "2")
        self.assertEqual(self.calls, [True])

    async def test_logout_clears_all_session_keys(self):
        await self.session.sign_in(make_token())
        await self.session.logout()

        for key in storage.SESSION_KEYS:
            self.assertIsNone(await storage.get_item(key))
        self.assertFalse(self.session.is_logged_in())
        self.assertEqual(self.calls, [True, False])

    async def test_every_subscriber_is_notified(self):
        other = []
        self.session.subscribe(other.append)
        await self.session.sign_in(make_token())
        self.assertEqual(self.calls, [True])
        self.assertEqual(other, [True])

    async def test_unsubscribe(self):
        self.unsubscribe()
        self.unsubscribe()
        await self.session.refresh()
        self.assertEqual(self.calls, [])

    async def test_reconcile_only_on_divergence(self):
        await self.session.refresh()
        self.assertFalse(await self.session.reconcile())
        self.assertEqual(self.calls, [False])

        # another client logs in through the shared storage file
        await storage.set_item(storage.TOKEN_KEY, make_token())
        self.assertTrue(await self.session.reconcile())
        self.assertTrue(self.session.is_logged_in())
        self.assertEqual(self.calls, [False, True])

        self.assertFalse(await self.session.reconcile())
        self.assertEqual(self.calls, [False, True])

        await storage.remove_items(storage.TOKEN_KEY)
        self.assertTrue(await self.session.reconcile())
        self.assertEqual(self.calls, [False, True, False])

    async def test_storage_failure_reads_as_logged_out(self):
        await self.session.sign_in(make_token())
        with mock.patch.object(
            storage,
            "get_item",
            mock.AsyncMock(side_effect=aiosqlite.OperationalError("locked")),
        ):
            self.assertFalse(await self.session.refresh())
        self.assertFalse(self.session.is_logged_in())
        self.assertEqual(self.calls, [True, False])

    async def test_resolve_identity(self):
        await self.session.sign_in(make_token(8, 1))
        self.assertEqual(await self.session.resolve_identity(), Identity(8, 1))

    async def test_resolve_identity_clears_unusable_token(self):
        await storage.set_item(storage.TOKEN_KEY, "not-a-token")
        await self.session.refresh()
        self.assertTrue(self.session.is_logged_in())

        self.assertIsNone(await self.session.resolve_identity())
        self.assertIsNone(await storage.get_item(storage.TOKEN_KEY))
        self.assertFalse(self.session.is_logged_in())
        self.assertEqual(self.calls[-1], False)


if __name__ == "__main__":
    unittest.main()
