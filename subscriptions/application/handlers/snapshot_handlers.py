"""
Handlers reacting to entitlement store writes.
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional

from core.domain.events import DomainEvent, EventHandler
from core.domain.value_objects import User
from core.metrics import access_decisions_total
from subscriptions.application.services.snapshot_cache_service import SnapshotCacheService
from subscriptions.domain.events import EntitlementSnapshotChanged
from subscriptions.domain.gate import Decision, EntitlementGate

logger = logging.getLogger(__name__)

DecisionListener = Callable[[Decision], None]


class SnapshotCacheHandler(EventHandler):
    """Writes every confirmed snapshot to the advisory cache."""

    def __init__(self, cache_service: SnapshotCacheService):
        """Initialize handler with cache service."""
        self.cache_service = cache_service

    async def handle(self, event: DomainEvent) -> None:
        """
        Cache the record if the snapshot is confirmed.

        Args:
            event: EntitlementSnapshotChanged
        """
        if not isinstance(event, EntitlementSnapshotChanged):
            return
        snapshot = event.snapshot
        if snapshot.confirmed and snapshot.record is not None:
            await self.cache_service.set_company(snapshot.record)


class GateReevaluationHandler(EventHandler):
    """
    Re-runs the entitlement gate after every store write.

    Keeps the latest decision for the session's user and notifies
    listeners only when the decision actually changes.
    """

    def __init__(
        self,
        user: User,
        grace_period_days: int,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize handler.

        Args:
            user: User the decision is for
            grace_period_days: Grace window length
            clock: Time source (defaults to the gate's own)
        """
        self.user = user
        self.grace_period_days = grace_period_days
        self.clock = clock
        self.decision: Optional[Decision] = None
        self._listeners: List[DecisionListener] = []
        self.trial_expired: Optional[bool] = None

    def add_listener(self, listener: DecisionListener) -> Callable[[], None]:
        """
        Register a decision listener.

        Args:
            listener: Called with each new decision

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def evaluate(self, snapshot) -> Decision:
        """Compute the decision for a snapshot without notifying anyone."""
        return EntitlementGate.decide(
            snapshot,
            self.user,
            now=self.clock() if self.clock else None,
            grace_period_days=self.grace_period_days,
            trial_expired=self.trial_expired,
        )

    async def handle(self, event: DomainEvent) -> None:
        """
        Re-evaluate access after a store write.

        Args:
            event: EntitlementSnapshotChanged
        """
        if not isinstance(event, EntitlementSnapshotChanged):
            return
        decision = self.evaluate(event.snapshot)
        if decision == self.decision:
            return

        self.decision = decision
        access_decisions_total.labels(
            allowed=str(decision.allowed).lower(),
            reason=str(decision.reason) if decision.reason else "none",
        ).inc()
        logger.info(
            "Access for user %s in company %s: %s",
            self.user.id,
            event.aggregate_id,
            "allowed" if decision.allowed else f"locked ({decision.reason})",
        )
        for listener in list(self._listeners):
            listener(decision)

