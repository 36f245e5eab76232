"""Drive submit and save callbacks that may return awaitables."""

from __future__ import annotations

import asyncio
import inspect
import threading
from queue import Queue
from typing import TYPE_CHECKING, Any

from flexiforms.exceptions import AsyncExecutionError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Coroutine


def _run_in_worker_thread[T](coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine on a private event loop in a worker thread.

    Args:
        coro: The coroutine to run.

    Raises:
        AsyncExecutionError: If the coroutine raises an exception.

    Returns:
        The result of the coroutine.
    """
    output: Queue[T | BaseException] = Queue(maxsize=1)

    def _runner() -> None:
        try:
            output.put(asyncio.run(coro))
        except BaseException as exc:  # noqa: BLE001
            output.put(exc)

    worker = threading.Thread(target=_runner, daemon=True)
    worker.start()
    worker.join()

    result = output.get()
    if isinstance(result, BaseException):
        raise AsyncExecutionError(result=result) from result
    return result


def run_async[T](coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion from synchronous code.

    Without a running loop the coroutine runs on a fresh loop; inside a running
    loop it runs on a worker thread so the caller's loop is never re-entered.

    Args:
        coro: The coroutine to run.

    Returns:
        The result of the coroutine.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    return _run_in_worker_thread(coro)


async def _await[T](awaitable: Awaitable[T]) -> T:
    return await awaitable


def settle(result: object) -> object:
    """Return a callback result, blocking on it first when it is awaitable.

    Args:
        result: Value returned by a host callback.

    Returns:
        object: The plain value, or the awaited value.
    """
    if inspect.isawaitable(result):
        return run_async(_await(result))
    return result
