"""Timeout guard, the Gemini preset and the parallel variant."""

import asyncio

import pytest

from notes_ai.core.exceptions import ErrorKind, OperationTimeoutError
from notes_ai.core.timeout_guard import call_with_timeout, with_parallel_timeout, with_timeout


async def _slow(value="late", delay=5.0):
    await asyncio.sleep(delay)
    return value


async def _fast(value="ok"):
    await asyncio.sleep(0)
    return value


@pytest.mark.asyncio
async def test_returns_result_within_deadline():
    assert await with_timeout(lambda: _fast("done"), timeout=1.0) == "done"


@pytest.mark.asyncio
async def test_expiry_raises_timeout_kind_with_message():
    with pytest.raises(OperationTimeoutError) as exc_info:
        await with_timeout(lambda: _slow(), timeout=0.01, message="summary call too slow")

    error = exc_info.value
    assert error.message == "summary call too slow"
    assert error.kind is ErrorKind.TIMEOUT
    assert error.retryable is True


@pytest.mark.asyncio
async def test_default_message_mentions_timeout():
    with pytest.raises(OperationTimeoutError, match="timed out after 0.01s"):
        await with_timeout(lambda: _slow(), timeout=0.01)


@pytest.mark.asyncio
async def test_gemini_preset_message():
    with pytest.raises(OperationTimeoutError) as exc_info:
        await call_with_timeout(lambda: _slow(), timeout=0.01)

    assert exc_info.value.message == "Gemini API call timed out after 0.01s"


@pytest.mark.asyncio
async def test_operation_errors_propagate_unchanged():
    async def boom():
        raise ValueError("bad input")

    with pytest.raises(ValueError, match="bad input"):
        await with_timeout(boom, timeout=1.0)


@pytest.mark.asyncio
async def test_non_positive_timeout_is_rejected():
    with pytest.raises(ValueError):
        await with_timeout(lambda: _fast(), timeout=0)


@pytest.mark.asyncio
async def test_parallel_results_keep_order():
    results = await with_parallel_timeout(
        [lambda: _slow("a", 0.02), lambda: _fast("b"), lambda: _slow("c", 0.01)],
        timeout=1.0,
    )
    assert results == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_parallel_group_fails_when_one_member_is_late():
    with pytest.raises(OperationTimeoutError):
        await with_parallel_timeout([lambda: _fast("a"), lambda: _slow("b")], timeout=0.05)


@pytest.mark.asyncio
async def test_parallel_group_fails_on_member_error():
    async def boom():
        raise RuntimeError("member failed")

    with pytest.raises(RuntimeError, match="member failed"):
        await with_parallel_timeout([lambda: _slow("a", 0.5), boom], timeout=1.0)


@pytest.mark.asyncio
async def test_parallel_failure_waits_for_cancelled_members():
    finished = []

    async def slow():
        try:
            await asyncio.sleep(5.0)
        finally:
            finished.append("slow")

    async def boom():
        raise RuntimeError("member failed")

    with pytest.raises(RuntimeError, match="member failed"):
        await with_parallel_timeout([slow, boom], timeout=1.0)

    assert finished == ["slow"]
