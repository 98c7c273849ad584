"""Blocking entry points over coroutine functions."""

import asyncio
from collections.abc import Awaitable, Callable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

T = TypeVar("T")


def run_blocking(factory: Callable[[], Awaitable[T]]) -> T:
    """Run the coroutine built by ``factory`` to completion and return its result.

    Outside of an event loop the coroutine runs on a fresh loop in the calling
    thread. Inside a running loop it runs on a fresh loop in a worker thread,
    so the caller never waits on the loop it is blocking.
    """

    async def _main() -> T:
        return await factory()

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_main())

    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, _main()).result()
