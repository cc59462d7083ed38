"""
业务服务装配
------------------------------------
按 settings 构建 store / identity / eventbus，并注入各业务服务
测试中可直接传入 MemoryDocumentStore / LocalIdentityProvider
"""
from dataclasses import dataclass, field
from typing import Optional

from codeshare.api.v1.services.code_registry import CodeRegistry
from codeshare.api.v1.services.session_service import SessionController
from codeshare.api.v1.services.update_service import UpdateService
from codeshare.api.v1.services.user_ledger import UserLedger
from codeshare.core.service_manager import ServiceManager
from codeshare.extension.eventbus.adapter_ws import WebSocketAdapter
from codeshare.extension.eventbus.base import EventBus
from codeshare.extension.identity import IdentityProvider, build_identity_provider
from codeshare.extension.store import DocumentStore, build_store
from codeshare.extension.sweeper import ExpirySweepService
from codeshare.util.timeutil import Clock, utc_now


@dataclass
class ServiceContainer:
    store: DocumentStore
    identity: IdentityProvider
    bus: EventBus
    ledger: UserLedger
    registry: CodeRegistry
    updates: UpdateService
    sessions: SessionController
    sweeper: ExpirySweepService
    services: ServiceManager = field(default_factory=ServiceManager)

    async def close(self):
        await self.services.close_all()
        await self.identity.close()
        await self.store.close()


def build_container(
        settings,
        *,
        store: Optional[DocumentStore] = None,
        identity: Optional[IdentityProvider] = None,
        bus: Optional[EventBus] = None,
        clock: Clock = utc_now,
) -> ServiceContainer:
    policy = settings.codeshare
    store = store or build_store(settings)
    identity = identity or build_identity_provider(settings)
    bus = bus or EventBus()

    ledger = UserLedger(
        store,
        bus,
        publish_cost=policy.publish_cost,
        ad_reward=policy.ad_reward,
        ad_delay_seconds=policy.ad_delay_seconds,
        clock=clock,
    )
    registry = CodeRegistry(
        store,
        ledger,
        bus,
        coins=policy.coins,
        publish_cost=policy.publish_cost,
        enforce_max_claims=policy.enforce_max_claims,
        clock=clock,
    )
    sessions = SessionController(
        identity,
        ledger,
        bus,
        admin_emails=settings.admin.emails,
        admin_session_ttl_seconds=policy.admin_session_ttl_seconds,
        clock=clock,
    )
    sweeper = ExpirySweepService(
        registry,
        sessions,
        interval_seconds=policy.sweep_interval_seconds,
        sweep_without_admin=policy.sweep_without_admin,
    )

    container = ServiceContainer(
        store=store,
        identity=identity,
        bus=bus,
        ledger=ledger,
        registry=registry,
        updates=UpdateService(store, bus, clock=clock),
        sessions=sessions,
        sweeper=sweeper,
    )
    container.services.register(WebSocketAdapter(bus))
    container.services.register(sweeper)
    return container
