import asyncio
from datetime import timedelta

import pytest

from codeshare.api.v1.services.code_registry import CODES
from codeshare.extension.sweeper import ExpirySweepService

from conftest import ADMIN_EMAIL, PASSWORD, code_doc


@pytest.fixture
def seeded(store, today):
    async def _seed():
        await store.set(CODES, "expired", code_doc("OLD", expiry=today - timedelta(days=1)))
        await store.set(CODES, "active", code_doc("NEW", expiry=today))
    return _seed


@pytest.mark.asyncio
async def test_sweep_skipped_without_admin_session(container, store, seeded):
    await seeded()

    assert await container.sweeper.run_once() is None
    assert len(await store.query(CODES)) == 2


@pytest.mark.asyncio
async def test_sweep_runs_while_admin_session_active(container, store, seeded, clock):
    await seeded()
    await container.sessions.sign_up(ADMIN_EMAIL, PASSWORD)

    assert await container.sweeper.run_once() == 1
    assert [d.key for d in await store.query(CODES)] == ["active"]

    clock.advance(hours=2)
    assert await container.sweeper.run_once() is None


@pytest.mark.asyncio
async def test_sweep_is_idempotent_across_workers(container, store, seeded):
    await seeded()
    other = ExpirySweepService(container.registry, container.sessions, sweep_without_admin=True)

    assert await other.run_once() == 1
    assert await other.run_once() == 0


@pytest.mark.asyncio
async def test_background_loop_survives_store_errors(container, store, seeded):
    await seeded()
    sweeper = ExpirySweepService(
        container.registry, container.sessions, interval_seconds=0.01, sweep_without_admin=True
    )
    store.available = False

    await sweeper.init()
    try:
        await asyncio.sleep(0.05)
        store.available = True
        for _ in range(50):
            await asyncio.sleep(0.01)
            if await store.get(CODES, "expired") is None:
                break
    finally:
        await sweeper.close()

    assert await store.get(CODES, "expired") is None
    assert await store.get(CODES, "active") is not None
    assert sweeper._task is None
