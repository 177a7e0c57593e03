"""
Entitlement session.

Explicitly constructed per signed-in user and company: one event bus, one
store, one allocator, one poller. Nothing here is shared between sessions.
"""
import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from activations.application.services.activation_poller import (
    ActivationPoller,
    StatusListener,
)
from activations.domain.polling import PollingSession
from activations.domain.predicates import (
    payment_confirmed,
    payment_rejected,
    seat_assigned,
)
from core.config import EntitlementSettings
from core.domain.events import DomainEvent
from core.domain.value_objects import User
from core.infrastructure.event_handlers import AuditLogEventHandler
from core.infrastructure.events import InMemoryEventBus
from seats.application.services.seat_allocator import SeatAllocator
from seats.domain.intent import SeatMutationIntent
from subscriptions.application.handlers.snapshot_handlers import (
    DecisionListener,
    GateReevaluationHandler,
    SnapshotCacheHandler,
)
from subscriptions.application.services.entitlement_store import EntitlementStore
from subscriptions.application.services.snapshot_cache_service import SnapshotCacheService
from subscriptions.domain.company import CompanyRecord
from subscriptions.domain.events import EntitlementSnapshotChanged
from subscriptions.domain.gate import Decision
from subscriptions.domain.snapshot import EntitlementSnapshot
from subscriptions.ports.remote_sync import RemoteSync

logger = logging.getLogger(__name__)


class EntitlementSession:
    """Entitlement engine wiring for one user in one company."""

    def __init__(
        self,
        company_id: str,
        user: User,
        remote_sync: RemoteSync,
        settings: Optional[EntitlementSettings] = None,
        cache_service: Optional[SnapshotCacheService] = None,
        clock: Optional[Callable[[], datetime]] = None,
        trial_expired: Optional[bool] = None,
    ):
        """
        Initialize session.

        Args:
            company_id: Company the user belongs to
            user: Signed-in user
            remote_sync: Billing backend port
            settings: Engine settings (defaults when omitted)
            cache_service: Advisory snapshot cache, if any
            clock: Time source for gate decisions
            trial_expired: External trial-elapsed signal
        """
        self.settings = settings or EntitlementSettings()
        self.user = user
        self.remote_sync = remote_sync
        self.cache_service = cache_service

        self.event_bus = InMemoryEventBus()
        self.store = EntitlementStore(company_id, self.event_bus)

        self.gate = GateReevaluationHandler(user, self.settings.grace_period_days, clock)
        self.gate.trial_expired = trial_expired
        self.event_bus.subscribe(EntitlementSnapshotChanged, self.gate)
        if cache_service is not None:
            self.event_bus.subscribe(EntitlementSnapshotChanged, SnapshotCacheHandler(cache_service))
        self.event_bus.subscribe(DomainEvent, AuditLogEventHandler())

        self.allocator = SeatAllocator(self.store, remote_sync, user, self.event_bus)
        self.poller = ActivationPoller(
            self.store,
            remote_sync,
            self.event_bus,
            interval_ms=self.settings.poll_interval_ms,
            max_attempts=self.settings.poll_max_attempts,
        )

    @property
    def company_id(self) -> str:
        """Company this session belongs to."""
        return self.store.company_id

    def snapshot(self) -> EntitlementSnapshot:
        """Current store snapshot."""
        return self.store.get()

    def decision(self) -> Decision:
        """Access decision for the session's user, evaluated now."""
        return self.gate.evaluate(self.store.get())

    def on_decision(self, listener: DecisionListener) -> Callable[[], None]:
        """Subscribe to access decision changes."""
        return self.gate.add_listener(listener)

    def on_polling_status(self, listener: StatusListener) -> Callable[[], None]:
        """Subscribe to the poller's status stream."""
        return self.poller.add_listener(listener)

    async def hydrate_from_cache(self) -> bool:
        """
        Seed the store from the advisory cache.

        Returns:
            True if a cached record was loaded
        """
        if self.cache_service is None:
            return False
        record = await self.cache_service.get_company(self.company_id)
        if record is None:
            return False
        return await self.store.hydrate(record)

    async def refresh(self) -> CompanyRecord:
        """
        Fetch the authoritative record and store it.

        Returns:
            Confirmed CompanyRecord
        """
        record = await self.remote_sync.refresh_company(self.company_id)
        await self.store.apply_remote(record)
        return record

    async def ensure_loaded(self) -> CompanyRecord:
        """Refresh only when nothing has been loaded yet."""
        if self.store.record is not None:
            return self.store.record
        return await self.refresh()

    async def grant_seat(self, target_user_id: str) -> SeatMutationIntent:
        """Grant a seat; a self-grant also waits for the backend to show it."""
        intent = await self.allocator.grant_seat(target_user_id)
        if target_user_id == self.user.id:
            self._await_own_seat()
        return intent

    async def revoke_seat(self, target_user_id: str) -> SeatMutationIntent:
        """Revoke a seat."""
        return await self.allocator.revoke_seat(target_user_id)

    async def commit(self, seated_user_ids: Iterable[str]) -> CompanyRecord:
        """Save a full seated set; an admin's own seat is confirmed by polling."""
        record = await self.allocator.commit(seated_user_ids)
        if self.user.is_admin:
            self._await_own_seat()
        return record

    def start_payment_confirmation(self) -> PollingSession:
        """
        Poll until the backend reflects a completed payment.

        A cancelled subscription ends the session as rejected.

        Returns:
            The new PollingSession
        """
        return self.poller.start_polling(payment_confirmed, payment_rejected, label="payment")

    async def skip_payment_confirmation(self) -> PollingSession:
        """Record a payment confirmation that needs no polling."""
        return await self.poller.complete_immediately(label="payment")

    def cancel_polling(self) -> None:
        """Stop any running confirmation loop."""
        self.poller.cancel()

    async def close(self) -> None:
        """Stop background work owned by this session."""
        await self.poller.close()

    def _await_own_seat(self) -> None:
        record = self.store.record
        if record is not None and record.is_seated(self.user.id):
            return
        logger.info(
            "Seat for %s not yet visible in company %s, polling", self.user.id, self.company_id
        )
        self.poller.start_polling(seat_assigned(self.user.id), label="seat_assignment")
