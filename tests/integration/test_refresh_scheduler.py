from datetime import timedelta

import pytest

from portfolio_engine.scheduler.refresh_scheduler import JOB_ID, RefreshScheduler

pytestmark = pytest.mark.integration


@pytest.mark.asyncio
async def test_scheduler_registers_interval_job(store):
    scheduler = RefreshScheduler(store)
    scheduler.start()
    try:
        job = scheduler.scheduler.get_job(JOB_ID)
        assert scheduler.running
        assert job.trigger.interval == timedelta(seconds=10)
        assert job.max_instances == 1
    finally:
        await scheduler.stop()

    assert not scheduler.running
    assert not scheduler.scheduler.running


@pytest.mark.asyncio
async def test_scheduler_follows_refresh_interval_setting(store):
    scheduler = RefreshScheduler(store)
    scheduler.start()
    try:
        store.update_settings(refresh_interval=30)

        assert scheduler.interval == 30
        assert scheduler.scheduler.get_job(JOB_ID).trigger.interval == timedelta(seconds=30)
    finally:
        await scheduler.stop()


@pytest.mark.asyncio
async def test_refresh_job_skips_empty_portfolio(store, market):
    scheduler = RefreshScheduler(store)

    await scheduler.refresh_job()
    assert market.quote_calls == []

    await store.add_holding("AAPL", 10, 150)
    await scheduler.refresh_job()
    assert market.quote_calls == ["AAPL", "AAPL"]
    assert store.snapshot.last_refresh is not None


@pytest.mark.asyncio
async def test_stop_is_idempotent(store):
    scheduler = RefreshScheduler(store)
    scheduler.start()

    await scheduler.stop()
    await scheduler.stop()

    assert not scheduler.scheduler.running
    store.update_settings(refresh_interval=45)
    assert scheduler.interval == 10
