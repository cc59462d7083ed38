import asyncio

import pytest

from codeshare.core.enums import EventName
from codeshare.core.exception import NotFound, ValidationError


@pytest.mark.asyncio
async def test_ensure_entry_creates_once(container, recorder):
    ledger = container.ledger

    first = await ledger.ensure_entry("u1")
    await ledger.credit("u1", 10)
    second = await ledger.ensure_entry("u1")

    assert first.points == 0
    assert second.points == 10
    assert recorder.of(EventName.USER_POINTS_CHANGED)[0] == {"uid": "u1", "points": 0}


@pytest.mark.asyncio
async def test_concurrent_ensure_entry_leaves_single_zero_balance(container, store):
    entries = await asyncio.gather(*[container.ledger.ensure_entry("u1") for _ in range(5)])

    assert {e.points for e in entries} == {0}
    assert len(await store.query("users")) == 1


@pytest.mark.asyncio
async def test_get_points_defaults_to_zero(container):
    assert await container.ledger.get_points("nobody") == 0
    assert await container.ledger.get_entry("nobody") is None


@pytest.mark.asyncio
async def test_credit_and_debit(container, recorder):
    ledger = container.ledger
    await ledger.ensure_entry("u1")

    await ledger.credit("u1", 10)
    await ledger.debit("u1", 3)

    assert await ledger.get_points("u1") == 7
    deltas = [d["delta"] for d in recorder.of(EventName.USER_POINTS_CHANGED) if "delta" in d]
    assert deltas == [10, -3]


@pytest.mark.asyncio
async def test_debit_has_no_floor(container):
    ledger = container.ledger
    await ledger.ensure_entry("u1")

    await ledger.debit("u1", 5)

    assert await ledger.get_points("u1") == -5


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -1, True, 1.5, "5"])
async def test_invalid_amount_rejected(container, amount):
    await container.ledger.ensure_entry("u1")

    with pytest.raises(ValidationError):
        await container.ledger.credit("u1", amount)
    with pytest.raises(ValidationError):
        await container.ledger.debit("u1", amount)

    assert await container.ledger.get_points("u1") == 0


@pytest.mark.asyncio
async def test_credit_missing_entry_raises_not_found(container):
    with pytest.raises(NotFound):
        await container.ledger.credit("ghost", 10)


@pytest.mark.asyncio
async def test_watch_ad_credits_reward_and_stamps_time(container, clock):
    ledger = container.ledger
    await ledger.ensure_entry("u1")

    reward = await ledger.watch_ad("u1")

    entry = await ledger.get_entry("u1")
    assert reward == 10
    assert entry.points == 10
    assert entry.last_ad_watch == clock()


@pytest.mark.asyncio
async def test_can_publish_threshold(container):
    ledger = container.ledger
    await ledger.ensure_entry("u1")
    await ledger.credit("u1", 4)
    assert await ledger.can_publish("u1") is False

    await ledger.credit("u1", 1)
    assert await ledger.can_publish("u1") is True
