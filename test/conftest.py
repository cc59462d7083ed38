import os
from datetime import datetime, timedelta, timezone

import pytest

os.environ.setdefault("APP_ENV", "test")

from codeshare.api.v1.services import build_container  # noqa: E402
from codeshare.core.config import AdminConfig, AppConfig, CodeShareConfig, Settings  # noqa: E402
from codeshare.core.enums import EventName  # noqa: E402
from codeshare.extension.identity.local import LocalIdentityProvider  # noqa: E402
from codeshare.extension.store.memory import MemoryDocumentStore  # noqa: E402

ADMIN_EMAIL = "admin@codeshare.local"
USER_EMAIL = "alice@example.com"
PASSWORD = "secret123"


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class EventRecorder:
    def __init__(self, bus):
        self.events: list[tuple[str, dict]] = []
        for name in EventName:
            bus.subscribe(name, self._handler(name.value))

    def _handler(self, name):
        async def _record(data):
            self.events.append((name, data))
        return _record

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def of(self, event: EventName) -> list[dict]:
        return [data for name, data in self.events if name == event.value]


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings():
    s = Settings()
    s.app = AppConfig(debug=False, log_path=None)
    s.admin = AdminConfig(emails=[ADMIN_EMAIL.upper()])
    s.codeshare = CodeShareConfig(ad_delay_seconds=0)
    return s


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def container(settings, store, clock):
    return build_container(settings, store=store, identity=LocalIdentityProvider(), clock=clock)


@pytest.fixture
def recorder(container):
    return EventRecorder(container.bus)


@pytest.fixture
def today(clock):
    return clock().date()


def code_doc(code="ABC123", *, expiry, max_claims=2, claimed=0, coin="USDT", by="admin"):
    return {
        "code": code,
        "coin": coin,
        "maxClaims": max_claims,
        "claimedCount": claimed,
        "expiryDate": expiry.isoformat(),
        "publishedBy": by,
        "publishedAt": "2026-10-01T00:00:00+00:00",
    }
