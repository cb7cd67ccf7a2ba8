"""Tests for serialized access to the shared in-memory store and for session tokens."""

from __future__ import annotations

import asyncio
import tempfile
import unittest
from pathlib import Path

from echo_social.config import Settings
from echo_social.context import build_context
from echo_social.services.sessions import SessionTokenStore


class StoreAccessTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.context = build_context(Settings(database_url="sqlite+pysqlite:///:memory:", _env_file=None))

    def tearDown(self) -> None:
        self.context.dispose()

    async def test_in_memory_store_allows_one_unit_of_work_at_a_time(self) -> None:
        self.assertIsNotNone(self.context.store_lock)
        order: list[str] = []

        async def unit(name: str) -> None:
            async with self.context.store_session():
                order.append(f"{name}:start")
                await asyncio.sleep(0.01)
                order.append(f"{name}:end")

        await asyncio.gather(unit("a"), unit("b"))

        self.assertEqual(order, ["a:start", "a:end", "b:start", "b:end"])
        self.assertFalse(self.context.store_lock.locked())

    async def test_lock_released_when_unit_of_work_fails(self) -> None:
        with self.assertRaises(RuntimeError):
            async with self.context.store_session():
                raise RuntimeError("boom")

        self.assertFalse(self.context.store_lock.locked())

    async def test_file_backed_store_uses_pooled_connections_without_lock(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            url = f"sqlite+pysqlite:///{Path(tmp) / 'echo.db'}"
            context = build_context(Settings(database_url=url, _env_file=None))
            try:
                self.assertIsNone(context.store_lock)
                async with context.store_session() as db:
                    self.assertIsNotNone(db)
            finally:
                context.dispose()


class SessionTokenStoreTests(unittest.TestCase):
    def test_oldest_token_revoked_past_per_user_cap(self) -> None:
        store = SessionTokenStore(token_bytes=16, max_tokens_per_user=2)
        first = store.issue(1)
        second = store.issue(1)
        third = store.issue(1)
        other = store.issue(2)

        self.assertIsNone(store.resolve(first))
        self.assertTrue(store.verify(second, 1))
        self.assertTrue(store.verify(third, 1))
        self.assertTrue(store.verify(other, 2))
        self.assertEqual(len(store), 3)

    def test_revoke_forgets_token(self) -> None:
        store = SessionTokenStore()
        token = store.issue(7)

        self.assertTrue(store.revoke(token))
        self.assertFalse(store.revoke(token))
        self.assertFalse(store.verify(token, 7))
        self.assertEqual(len(store), 0)


if __name__ == "__main__":
    unittest.main()
