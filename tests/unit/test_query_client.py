import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock

from services.console.app.query.client import QueryClient


class TestQueryClient(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.query_client = QueryClient()

    async def test_every_read_refetches_by_default(self):
        fn = AsyncMock(side_effect=[{"data": [1]}, {"data": [1, 2]}])

        first = await self.query_client.fetch_query(("users:search", "", 100), fn)
        second = await self.query_client.fetch_query(("users:search", "", 100), fn)

        self.assertEqual(first, {"data": [1]})
        self.assertEqual(second, {"data": [1, 2]})
        self.assertEqual(fn.await_count, 2)

    async def test_stale_time_caches_until_invalidated(self):
        query_client = QueryClient(stale_time=60)
        fn = AsyncMock(return_value={"data": [1, 2]})

        first = await query_client.fetch_query(("users:search", "", 100), fn)
        second = await query_client.fetch_query(("users:search", "", 100), fn)

        self.assertEqual(second, first)
        fn.assert_awaited_once()

        query_client.invalidate_queries("users:search")
        await query_client.fetch_query(("users:search", "", 100), fn)
        self.assertEqual(fn.await_count, 2)

    async def test_force_skips_fresh_data(self):
        query_client = QueryClient(stale_time=60)
        fn = AsyncMock(return_value={"data": {"uid": "a1"}})

        await query_client.fetch_query(("announcements:a1",), fn)
        await query_client.fetch_query(("announcements:a1",), fn, force=True)

        self.assertEqual(fn.await_count, 2)

    async def test_invalidate_only_touches_matching_namespace(self):
        await self.query_client.fetch_query(("users:search", "a", 100), AsyncMock(return_value=1))
        await self.query_client.fetch_query(("users:search", "b", 100), AsyncMock(return_value=2))
        await self.query_client.fetch_query(("events:search", "", 100), AsyncMock(return_value=3))

        count = self.query_client.invalidate_queries("users:search")

        self.assertEqual(count, 2)
        self.assertTrue(self.query_client.get_query_state(("users:search", "a", 100)).is_invalidated)
        self.assertFalse(self.query_client.get_query_state(("events:search", "", 100)).is_invalidated)

    async def test_concurrent_fetches_share_one_call(self):
        release = asyncio.Event()

        async def slow():
            await release.wait()
            return "done"

        fn = AsyncMock(side_effect=slow)
        first = asyncio.create_task(self.query_client.fetch_query("events:1", fn))
        second = asyncio.create_task(self.query_client.fetch_query("events:1", fn))
        await asyncio.sleep(0)

        state = self.query_client.get_query_state("events:1")
        self.assertTrue(state.is_loading)
        self.assertTrue(state.is_fetching)

        release.set()
        self.assertEqual(await first, "done")
        self.assertEqual(await second, "done")
        fn.assert_awaited_once()
        self.assertFalse(state.is_fetching)
        self.assertTrue(state.is_success)

    async def test_failed_fetch_records_error_and_raises(self):
        fn = AsyncMock(side_effect=RuntimeError("boom"))

        with self.assertRaises(RuntimeError):
            await self.query_client.fetch_query("events:2", fn)

        state = self.query_client.get_query_state("events:2")
        self.assertEqual(state.status, "error")
        self.assertFalse(state.is_fetching)

    async def test_prefetch_swallows_errors(self):
        await self.query_client.prefetch_query("events:3", AsyncMock(side_effect=RuntimeError("boom")))
        self.assertEqual(self.query_client.get_query_state("events:3").status, "error")

    async def test_cancelled_caller_does_not_strand_others(self):
        release = asyncio.Event()

        async def slow():
            await release.wait()
            return "done"

        fn = AsyncMock(side_effect=slow)
        owner = asyncio.create_task(self.query_client.fetch_query("events:1", fn))
        waiter = asyncio.create_task(self.query_client.fetch_query("events:1", fn))
        await asyncio.sleep(0)

        owner.cancel()
        await asyncio.sleep(0)
        release.set()

        self.assertEqual(await asyncio.wait_for(waiter, 1.0), "done")
        with self.assertRaises(asyncio.CancelledError):
            await owner
        fn.assert_awaited_once()
        self.assertEqual(self.query_client.get_query_data("events:1"), "done")

    async def test_wait_for_query_returns_the_running_fetch(self):
        release = asyncio.Event()

        async def slow():
            await release.wait()
            return "fresh"

        self.query_client.set_query_data("events:1", "old")
        fetch = asyncio.create_task(self.query_client.fetch_query("events:1", slow))
        await asyncio.sleep(0)

        waiting = asyncio.create_task(self.query_client.wait_for_query("events:1"))
        await asyncio.sleep(0)
        release.set()

        self.assertEqual(await waiting, "fresh")
        self.assertEqual(await fetch, "fresh")

    async def test_reading_state_does_not_store_a_query(self):
        state = self.query_client.get_query_state(("users:search", "nobody", 100))

        self.assertEqual(state.status, "idle")
        self.assertEqual(len(self.query_client), 0)

    async def test_unused_queries_are_collected(self):
        query_client = QueryClient(cache_time=0)
        for search in ("a", "ab", "abc"):
            await query_client.fetch_query(("users:search", search, 100), AsyncMock(return_value={"data": []}))

        self.assertEqual(len(query_client), 1)
        self.assertIsNotNone(query_client.get_query_data(("users:search", "abc", 100)))

    async def test_recently_used_queries_survive_collection(self):
        for search in ("a", "ab"):
            await self.query_client.fetch_query(("users:search", search, 100), AsyncMock(return_value={"data": []}))

        self.assertEqual(self.query_client.collect_garbage(), 0)
        self.assertEqual(len(self.query_client), 2)

    async def test_mutate_runs_on_success_only_when_fn_succeeds(self):
        on_success = MagicMock()

        await self.query_client.mutate(AsyncMock(return_value="ack"), on_success=on_success)
        on_success.assert_called_once_with("ack")

        on_success.reset_mock()
        with self.assertRaises(RuntimeError):
            await self.query_client.mutate(AsyncMock(side_effect=RuntimeError("nope")), on_success=on_success)
        on_success.assert_not_called()

    async def test_clear_drops_everything(self):
        self.query_client.set_query_data("users:search", {"data": []})
        self.assertEqual(len(self.query_client), 1)

        self.query_client.clear()

        self.assertEqual(len(self.query_client), 0)
        self.assertIsNone(self.query_client.get_query_data("users:search"))

if __name__ == '__main__':
    unittest.main()
