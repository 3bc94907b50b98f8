"""Common utility functions"""

import asyncio
import hashlib
from collections.abc import Callable, Coroutine
from typing import Any


def run_coro_safely(coro: Coroutine[Any, Any, Any]) -> Any | asyncio.Task[Any]:
    """Run a coroutine in the current event loop or a new one if none exists."""
    try:
        loop = asyncio.get_running_loop()

    except RuntimeError:
        return asyncio.run(coro)

    else:
        return loop.create_task(coro)


async def call_maybe_async(func: Callable[..., Any], *args, **kwargs) -> Any:
    """Await ``func`` if it is a coroutine function, otherwise run it in a worker thread."""
    if asyncio.iscoroutinefunction(func):
        return await func(*args, **kwargs)

    result = await asyncio.to_thread(func, *args, **kwargs)
    if asyncio.iscoroutine(result):
        result = await result
    return result


def hash_text(text: str, encoding: str = "utf-8") -> str:
    """Return the SHA-256 hex digest of ``text``."""
    return hashlib.sha256(text.encode(encoding)).hexdigest()


def count_words(text: str) -> int:
    """Count whitespace separated words."""
    return len(text.split())
