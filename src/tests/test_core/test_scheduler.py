import asyncio
import pytest
from gateway_bridge.core.scheduler import DeferredTask


@pytest.mark.asyncio
async def test_schedules_in_one_window_share_a_single_run():
    calls = []

    async def flush():
        calls.append("flush")
        return len(calls)

    task = DeferredTask(flush)
    first = task.schedule()
    second = task.schedule()

    assert first is second
    assert task.pending
    assert calls == []

    assert await first == 1
    assert calls == ["flush"]
    assert not task.pending


@pytest.mark.asyncio
async def test_schedule_after_run_opens_new_window():
    runs = []

    async def flush():
        runs.append(len(runs))

    task = DeferredTask(flush)
    await task.schedule()
    await task.schedule()

    assert runs == [0, 1]
    assert task.runs == 2


@pytest.mark.asyncio
async def test_schedule_while_running_opens_new_window():
    started = asyncio.Event()
    release = asyncio.Event()

    async def flush():
        started.set()
        await release.wait()

    task = DeferredTask(flush)
    first = task.schedule()
    await started.wait()

    second = task.schedule()
    assert second is not first

    release.set()
    await asyncio.gather(first, second)
    assert task.runs == 2


@pytest.mark.asyncio
async def test_failure_reaches_every_caller_in_window():
    async def flush():
        raise RuntimeError("device gone")

    task = DeferredTask(flush)
    results = await asyncio.gather(task.schedule(), task.schedule(), return_exceptions=True)

    assert len(results) == 2
    assert all(isinstance(result, RuntimeError) for result in results)
