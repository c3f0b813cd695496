import asyncio
from typing import Any, Tuple


class Debouncer:
    """
    Coalesce a burst of values into the last one.

    Each call to :meth:`settle` waits ``delay`` seconds; only the call holding
    the most recent value when its wait ends reports that the value settled.
    """

    def __init__(self, delay: float, initial: Any = None):
        self.delay = delay
        self.value = initial
        self._generation = 0

    async def settle(self, value: Any) -> Tuple[bool, Any]:
        self._generation += 1
        generation = self._generation
        self.value = value
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        return generation == self._generation, self.value

    def supersede(self, value: Any) -> None:
        """Take ``value`` as settled right away, cancelling any pending call."""
        self._generation += 1
        self.value = value
