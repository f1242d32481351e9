from __future__ import annotations

import asyncio
from typing import Any, Awaitable, List


async def join_all(*aws: Awaitable[Any]) -> List[Any]:
    """
    Start every awaitable at once and wait for all of them.

    Results come back in argument order. The first exception raised is
    propagated; the remaining calls are left to finish and their outcome
    is discarded.
    """
    if not aws:
        return []
    return list(await asyncio.gather(*aws))
