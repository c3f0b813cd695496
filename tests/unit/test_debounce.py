import asyncio
import unittest

from services.console.app.utils.debounce import Debouncer


class TestDebouncer(unittest.IsolatedAsyncioTestCase):
    async def test_single_value_settles(self):
        debouncer = Debouncer(0.01)
        settled, value = await debouncer.settle("ada")
        self.assertTrue(settled)
        self.assertEqual(value, "ada")

    async def test_burst_settles_on_last_value(self):
        debouncer = Debouncer(0.05)

        results = await asyncio.gather(
            debouncer.settle("a"),
            debouncer.settle("ad"),
            debouncer.settle("ada"),
        )

        self.assertEqual(results, [(False, "ada"), (False, "ada"), (True, "ada")])

    async def test_supersede_cancels_pending_value(self):
        debouncer = Debouncer(0.05)

        pending = asyncio.create_task(debouncer.settle("a"))
        await asyncio.sleep(0)
        debouncer.supersede("")

        self.assertEqual(await pending, (False, ""))

if __name__ == '__main__':
    unittest.main()
