"""
Tests for the background job scheduler registry.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from apscheduler.triggers.interval import IntervalTrigger

from app.core import scheduler


@pytest_asyncio.fixture(autouse=True)
async def _clean_registry():
    scheduler.unregister_all_jobs()
    yield
    await scheduler.stop_scheduler()
    scheduler.unregister_all_jobs()


class TestTriggerJobManually:
    @pytest.mark.asyncio
    async def test_unknown_job(self):
        with pytest.raises(ValueError, match="not found in registry"):
            await scheduler.trigger_job_manually("missing")

    @pytest.mark.asyncio
    async def test_success_returns_result(self):
        job = AsyncMock(return_value={"fixed": 2})
        scheduler.register_job("job", job, IntervalTrigger(minutes=5))

        result = await scheduler.trigger_job_manually("job")

        job.assert_awaited_once()
        assert result["status"] == "success"
        assert result["result"] == {"fixed": 2}

    @pytest.mark.asyncio
    async def test_failure_is_reported(self):
        job = AsyncMock(side_effect=RuntimeError("boom"))
        scheduler.register_job("job", job, IntervalTrigger(minutes=5))

        result = await scheduler.trigger_job_manually("job")

        assert result["status"] == "error"
        assert result["error"] == "boom"


class TestScheduling:
    @pytest.mark.asyncio
    async def test_jobs_registered_before_start_are_scheduled(self):
        scheduler.register_job("early", AsyncMock(), IntervalTrigger(minutes=5))

        await scheduler.start_scheduler()

        jobs = scheduler.list_registered_jobs()
        assert [j["job_id"] for j in jobs] == ["early"]
        assert jobs[0]["next_run_time"] is not None
        assert jobs[0]["is_paused"] is False

    @pytest.mark.asyncio
    async def test_pause_and_resume(self):
        scheduler.register_job("job", AsyncMock(), IntervalTrigger(minutes=5))
        await scheduler.start_scheduler()

        assert scheduler.pause_job("job") is True
        assert scheduler.list_registered_jobs()[0]["is_paused"] is True

        assert scheduler.resume_job("job") is True
        assert scheduler.list_registered_jobs()[0]["is_paused"] is False

    @pytest.mark.asyncio
    async def test_pause_without_scheduler(self):
        assert scheduler.pause_job("job") is False

    @pytest.mark.asyncio
    async def test_scheduling_without_scheduler_is_deferred(self):
        scheduler.register_job("late", AsyncMock(), IntervalTrigger(minutes=5))

        scheduler._add_to_scheduler(scheduler._job_registry["late"])

        assert scheduler.list_registered_jobs()[0]["next_run_time"] is None
