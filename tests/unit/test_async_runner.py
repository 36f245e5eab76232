from __future__ import annotations

import asyncio

import pytest

from flexiforms.async_runner import run_async, settle
from flexiforms.exceptions import AsyncExecutionError


async def _identity(value: int) -> int:
    await asyncio.sleep(0)
    return value


async def _fail() -> None:
    message = "store offline"
    raise RuntimeError(message)


def test_run_async_from_sync_context() -> None:
    assert run_async(_identity(7)) == 7


def test_run_async_with_running_loop() -> None:
    async def _nested() -> int:
        await asyncio.sleep(0)
        return run_async(_identity(11))

    assert asyncio.run(_nested()) == 11


def test_run_async_wraps_errors_inside_running_loop() -> None:
    async def _nested() -> None:
        run_async(_fail())

    with pytest.raises(AsyncExecutionError, match="store offline"):
        asyncio.run(_nested())


def test_settle_passes_plain_values_through() -> None:
    assert settle(None) is None
    assert settle(5) == 5


def test_settle_awaits_coroutines() -> None:
    assert settle(_identity(3)) == 3
