"""
Seat allocator.

Applies seat changes optimistically to the entitlement store, submits the
complete seated set to the billing backend and rolls back on failure.
"""
import asyncio
import logging
from typing import Iterable, List, Optional

from core.domain.events import EventBus
from core.domain.exceptions import CompanyNotFoundError, DomainException
from core.domain.value_objects import User
from core.instrumentation import Status, StatusCode, get_tracer
from core.metrics import seat_mutations_total
from seats.domain.events import SeatGranted, SeatRevoked, SeatsCommitted
from seats.domain.intent import SeatAction, SeatMutationIntent
from seats.domain.services import SeatPolicy
from subscriptions.application.services.entitlement_store import EntitlementStore
from subscriptions.domain.company import CompanyRecord
from subscriptions.ports.remote_sync import RemoteSync

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class SeatAllocator:
    """
    Seat operations for one acting user in one company.

    Operations are serialised so an optimistic write and its rollback
    never interleave with another seat change from the same session.
    """

    def __init__(
        self,
        store: EntitlementStore,
        remote_sync: RemoteSync,
        acting_user: User,
        event_bus: EventBus,
    ):
        """
        Initialize allocator.

        Args:
            store: Company entitlement store
            remote_sync: Billing backend port
            acting_user: User performing seat changes
            event_bus: Session event bus
        """
        self.store = store
        self.remote_sync = remote_sync
        self.acting_user = acting_user
        self.event_bus = event_bus
        self._operation_lock = asyncio.Lock()

    def _current_record(self) -> CompanyRecord:
        record = self.store.record
        if record is None:
            raise CompanyNotFoundError(
                f"No subscription loaded for company {self.store.company_id}"
            )
        return record

    async def grant_seat(self, target_user_id: str) -> SeatMutationIntent:
        """
        Give a user a seat.

        Args:
            target_user_id: User to seat

        Returns:
            SeatMutationIntent describing the change

        Raises:
            NotAuthorizedError: If the acting user is not an admin
            CapacityExceededError: If every seat is taken (no network call)
            NetworkError: If submission failed (state rolled back)
            BackendRejectedError: If the backend refused (state rolled back)
        """
        intent = SeatMutationIntent.create(target_user_id, SeatAction.GRANT)
        with tracer.start_as_current_span("seats.grant") as span:
            span.set_attribute("company.id", self.store.company_id)
            span.set_attribute("seat.target_user_id", target_user_id)
            async with self._operation_lock:
                try:
                    SeatPolicy.check_can_manage(self.acting_user)
                    record = self._current_record()
                    if record.is_seated(target_user_id):
                        logger.debug("User %s already seated, nothing to grant", target_user_id)
                        seat_mutations_total.labels(action="grant", outcome="noop").inc()
                        return intent
                    SeatPolicy.check_capacity(record, record.seated_count + 1)
                    await self._submit(intent.apply_to(record.seated_user_ids))
                except DomainException as e:
                    self._record_failure("grant", e, span)
                    raise

            seat_mutations_total.labels(action="grant", outcome="ok").inc()
            logger.info(
                "Seat granted to %s in company %s by %s",
                target_user_id,
                self.store.company_id,
                self.acting_user.id,
            )
            await self.event_bus.publish(
                SeatGranted(self.store.company_id, target_user_id, self.acting_user.id)
            )
            return intent

    async def revoke_seat(self, target_user_id: str) -> SeatMutationIntent:
        """
        Remove a user's seat.

        Args:
            target_user_id: User to unseat

        Returns:
            SeatMutationIntent describing the change

        Raises:
            NotAuthorizedError: If the acting user is not an admin
            SelfLockViolationError: If the only seated admin targets themselves
            NetworkError: If submission failed (state rolled back)
            BackendRejectedError: If the backend refused (state rolled back)
        """
        intent = SeatMutationIntent.create(target_user_id, SeatAction.REVOKE)
        with tracer.start_as_current_span("seats.revoke") as span:
            span.set_attribute("company.id", self.store.company_id)
            span.set_attribute("seat.target_user_id", target_user_id)
            async with self._operation_lock:
                try:
                    SeatPolicy.check_can_manage(self.acting_user)
                    record = self._current_record()
                    SeatPolicy.check_self_revoke(record, self.acting_user, target_user_id)
                    if not record.is_seated(target_user_id):
                        logger.debug("User %s holds no seat, nothing to revoke", target_user_id)
                        seat_mutations_total.labels(action="revoke", outcome="noop").inc()
                        return intent
                    await self._submit(intent.apply_to(record.seated_user_ids))
                except DomainException as e:
                    self._record_failure("revoke", e, span)
                    raise

            seat_mutations_total.labels(action="revoke", outcome="ok").inc()
            logger.info(
                "Seat revoked from %s in company %s by %s",
                target_user_id,
                self.store.company_id,
                self.acting_user.id,
            )
            await self.event_bus.publish(
                SeatRevoked(self.store.company_id, target_user_id, self.acting_user.id)
            )
            return intent

    async def commit(self, seated_user_ids_final: Iterable[str]) -> CompanyRecord:
        """
        Save a complete seated set.

        An administrator saving the set always keeps their own seat.

        Args:
            seated_user_ids_final: Seated set chosen by the caller

        Returns:
            Confirmed CompanyRecord

        Raises:
            NotAuthorizedError: If the acting user is not an admin
            CapacityExceededError: If the set is larger than the plan
            NetworkError: If submission failed (state rolled back)
            BackendRejectedError: If the backend refused (state rolled back)
        """
        with tracer.start_as_current_span("seats.commit") as span:
            span.set_attribute("company.id", self.store.company_id)
            async with self._operation_lock:
                try:
                    SeatPolicy.check_can_manage(self.acting_user)
                    record = self._current_record()
                    final = SeatPolicy.final_seat_order(
                        record, seated_user_ids_final, self.acting_user
                    )
                    SeatPolicy.check_capacity(record, len(final))
                    confirmed = await self._submit(final)
                except DomainException as e:
                    self._record_failure("commit", e, span)
                    raise

            seat_mutations_total.labels(action="commit", outcome="ok").inc()
            logger.info(
                "Seats committed for company %s by %s: %d seated",
                self.store.company_id,
                self.acting_user.id,
                confirmed.seated_count,
            )
            await self.event_bus.publish(
                SeatsCommitted(
                    self.store.company_id, confirmed.seated_user_ids, self.acting_user.id
                )
            )
            return confirmed

    def removal_candidate(self) -> Optional[str]:
        """
        Seated user to drop first when the plan shrinks.

        Returns:
            Newest seated non-admin, or None
        """
        record = self.store.record
        if record is None:
            return None
        return record.newest_seated_non_admin()

    async def _submit(self, seated_user_ids: tuple[str, ...]) -> CompanyRecord:
        """Optimistically apply, then send the full set; roll back on failure."""
        await self.store.apply_optimistic(seated_user_ids)
        payload: List[str] = list(seated_user_ids)
        try:
            confirmed = await self.remote_sync.update_seated_employees(
                self.store.company_id, payload
            )
        except DomainException as e:
            logger.warning(
                "Seat update for company %s failed, rolling back: %s",
                self.store.company_id,
                e.message,
            )
            await self.store.rollback()
            raise
        except asyncio.CancelledError:
            await self.store.rollback()
            raise
        await self.store.apply_remote(confirmed)
        return confirmed

    @staticmethod
    def _record_failure(action: str, error: DomainException, span) -> None:
        seat_mutations_total.labels(action=action, outcome=error.code).inc()
        span.set_status(Status(StatusCode.ERROR, error.message))
