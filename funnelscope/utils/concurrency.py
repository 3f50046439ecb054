"""
Fan-out helpers.

Two distinct patterns, never interchangeable:

- gather_fail_fast: all-or-nothing. Used for fetches of the same source
  (current/previous snapshots, trailing historical periods) where partial
  data is unsafe to reason about. The first failure propagates and the
  remaining fetches are cancelled.
- gather_settled: fault-isolated. Used across sources; each outcome is
  either a value or the exception it raised, in submission order.
"""

import asyncio
from typing import Awaitable, List, TypeVar, Union

T = TypeVar("T")


async def gather_fail_fast(*awaitables: Awaitable[T]) -> List[T]:
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        raise


async def gather_settled(*awaitables: Awaitable[T]) -> List[Union[T, BaseException]]:
    return list(await asyncio.gather(*awaitables, return_exceptions=True))
