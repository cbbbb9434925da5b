# release_tool/utils/async_utils.py
"""Asynchronous operation utilities"""

import asyncio
import threading
from typing import Any, Coroutine, TypeVar

T = TypeVar('T')


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run async coroutine in sync context

    Args:
        coro: Coroutine to run

    Returns:
        Coroutine result
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is None or not loop.is_running():
        return asyncio.run(coro)

    # Already inside a loop: run on a fresh loop in a helper thread
    result = None
    exception = None

    def run_in_thread():
        nonlocal result, exception
        try:
            result = asyncio.run(coro)
        except Exception as e:
            exception = e

    thread = threading.Thread(target=run_in_thread)
    thread.start()
    thread.join()

    if exception:
        raise exception
    return result


async def wait_for_event(event: asyncio.Event, timeout: float) -> bool:
    """
    Wait until event is set or timeout elapses

    Args:
        event: Event to wait on
        timeout: Maximum wait in seconds

    Returns:
        True if the event was set, False on timeout
    """
    if event.is_set():
        return True
    try:
        await asyncio.wait_for(event.wait(), timeout=max(timeout, 0))
        return True
    except asyncio.TimeoutError:
        return False
