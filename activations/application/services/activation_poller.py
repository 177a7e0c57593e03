"""
Activation poller.

After a payment or seat change the billing backend catches up on its own
schedule. The poller re-fetches the company record at a fixed interval
until a terminal predicate holds, a rejection is observed, or attempts
run out.
"""
import asyncio
import logging
from typing import Callable, List, Optional, Set

from activations.domain.events import PollingStatusChanged
from activations.domain.polling import (
    DEFAULT_INTERVAL_MS,
    DEFAULT_MAX_ATTEMPTS,
    TIMED_OUT_MESSAGE,
    PollingSession,
    PollingState,
    PollingStatus,
    Predicate,
    progress_message,
)
from core.domain.events import EventBus
from core.domain.exceptions import (
    BackendRejectedError,
    CompanyNotFoundError,
    NetworkError,
)
from core.instrumentation import Status, StatusCode, get_tracer
from core.metrics import polling_attempts_total, polling_sessions_total
from subscriptions.application.services.entitlement_store import EntitlementStore
from subscriptions.domain.company import CompanyRecord
from subscriptions.ports.remote_sync import RemoteSync

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

StatusListener = Callable[[PollingStatus], None]


def _consume_result(future: "asyncio.Future") -> None:
    """Mark a detached call's outcome as retrieved."""
    if not future.cancelled():
        future.exception()


class ActivationPoller:
    """
    Bounded, fixed-interval confirmation loop for one company.

    At most one session runs at a time; starting a new one cancels the
    previous one. Per-attempt failures are never raised: the outcome is
    only reported as the session's final status.
    """

    def __init__(
        self,
        store: EntitlementStore,
        remote_sync: RemoteSync,
        event_bus: EventBus,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        """
        Initialize poller.

        Args:
            store: Company entitlement store
            remote_sync: Billing backend port
            event_bus: Session event bus
            interval_ms: Default wait between attempts
            max_attempts: Default attempt bound
        """
        self.store = store
        self.remote_sync = remote_sync
        self.event_bus = event_bus
        self.interval_ms = interval_ms
        self.max_attempts = max_attempts
        self._session: Optional[PollingSession] = None
        self._listeners: List[StatusListener] = []
        self._background: Set[asyncio.Task] = set()

    @property
    def session(self) -> Optional[PollingSession]:
        """Current (or last finished) session; None when idle."""
        return self._session

    @property
    def state(self) -> PollingState:
        """Current state machine state."""
        if self._session is None:
            return PollingState.IDLE
        if self._session.final_status is None:
            return PollingState.POLLING
        return self._session.final_status.state

    def add_listener(self, listener: StatusListener) -> Callable[[], None]:
        """
        Subscribe to the status stream.

        Args:
            listener: Called synchronously with every status

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def start_polling(
        self,
        terminal_predicate: Predicate,
        rejection_predicate: Optional[Predicate] = None,
        label: str = "activation",
        interval_ms: Optional[int] = None,
        max_attempts: Optional[int] = None,
    ) -> PollingSession:
        """
        Start a new polling session, cancelling any running one.

        Must be called from a running event loop.

        Args:
            terminal_predicate: Condition meaning "confirmed"
            rejection_predicate: Condition meaning "definitively refused"
            label: Session label for logs and metrics
            interval_ms: Override for the fixed interval
            max_attempts: Override for the attempt bound

        Returns:
            The new PollingSession
        """
        self.cancel()
        session = PollingSession(
            company_id=self.store.company_id,
            terminal_predicate=terminal_predicate,
            rejection_predicate=rejection_predicate,
            max_attempts=self.max_attempts if max_attempts is None else max_attempts,
            interval_ms=self.interval_ms if interval_ms is None else interval_ms,
            label=label,
        )
        self._session = session
        session.task = asyncio.get_running_loop().create_task(
            self._run(session), name=f"poll-{session.company_id}-{label}"
        )
        logger.info(
            "Polling started for company %s (%s): %d attempts every %dms",
            session.company_id,
            label,
            session.max_attempts,
            session.interval_ms,
        )
        return session

    async def complete_immediately(self, label: str = "activation") -> PollingSession:
        """
        Record a session that is already satisfied, without calling the backend.

        Args:
            label: Session label for logs and metrics

        Returns:
            A finished PollingSession in the succeeded state
        """
        self.cancel()
        session = PollingSession(
            company_id=self.store.company_id,
            terminal_predicate=lambda record: True,
            max_attempts=self.max_attempts,
            interval_ms=self.interval_ms,
            label=label,
        )
        self._session = session
        logger.info("Confirmation skipped for company %s (%s)", session.company_id, label)
        await self._finish(session, session.status(PollingState.SUCCEEDED, "Subscription activated"))
        return session

    def cancel(self) -> None:
        """
        Stop the current session and return to idle.

        Takes effect immediately. A backend call already in flight keeps
        running, but its result is discarded.
        """
        session = self._session
        if session is None:
            return
        self._session = None
        if session.is_finished:
            return

        if session.task is not None:
            session.task.cancel()
        status = session.status(PollingState.CANCELLED, "Confirmation cancelled")
        self._record_final(session, status)
        self._notify(status)
        self._publish_in_background(status)

    async def wait(self, session: Optional[PollingSession] = None) -> Optional[PollingStatus]:
        """
        Wait for a session to end.

        Args:
            session: Session to wait for (defaults to the current one)

        Returns:
            The session's final status, or None when idle
        """
        session = session or self._session
        if session is None:
            return None
        if session.task is not None and not session.task.done():
            await asyncio.wait({session.task})
        return session.final_status

    async def close(self) -> None:
        """Cancel polling and flush pending store writes and status events."""
        self.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    async def _run(self, session: PollingSession) -> None:
        with tracer.start_as_current_span("activations.poll") as span:
            span.set_attribute("company.id", session.company_id)
            span.set_attribute("polling.label", session.label)
            try:
                outcome = await self._poll(session)
            except asyncio.CancelledError:
                span.set_attribute("polling.state", PollingState.CANCELLED.value)
                raise
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error(
                    "Polling for company %s crashed: %s", session.company_id, e, exc_info=True
                )
                outcome = session.status(PollingState.ERROR, str(e), type(e).__name__)

            span.set_attribute("polling.state", outcome.state.value)
            span.set_attribute("polling.attempts", session.attempt)
            if outcome.state != PollingState.SUCCEEDED:
                span.set_status(Status(StatusCode.ERROR, outcome.message))
            await self._finish(session, outcome)

    async def _poll(self, session: PollingSession) -> PollingStatus:
        while session.has_attempts_left:
            session.attempt += 1
            await self._emit(
                session.status(PollingState.POLLING, progress_message(session.attempt))
            )

            try:
                record = await self._refresh(session.company_id)
            except BackendRejectedError as e:
                polling_attempts_total.labels(outcome="rejected").inc()
                logger.warning("Backend rejected company %s: %s", session.company_id, e.message)
                return session.status(PollingState.REJECTED, e.message, e.code)
            except CompanyNotFoundError as e:
                polling_attempts_total.labels(outcome="not_found").inc()
                return session.status(PollingState.ERROR, e.message, e.code)
            except NetworkError as e:
                polling_attempts_total.labels(outcome="network_error").inc()
                logger.warning(
                    "Attempt %d/%d for company %s failed: %s",
                    session.attempt,
                    session.max_attempts,
                    session.company_id,
                    e.message,
                )
            else:
                polling_attempts_total.labels(outcome="ok").inc()
                session.successful_refreshes += 1
                await self._apply(session, record)

            # Evaluate whatever the store holds now, even after a failed refresh
            current = self.store.record
            if current is not None:
                if session.terminal_predicate(current):
                    return session.status(PollingState.SUCCEEDED, "Subscription activated")
                if session.rejection_predicate and session.rejection_predicate(current):
                    return session.status(
                        PollingState.REJECTED,
                        "Your subscription was cancelled by the billing provider. "
                        "Please choose a plan to continue.",
                        "PAYMENT_REJECTED",
                    )

            if session.has_attempts_left:
                await asyncio.sleep(session.interval_ms / 1000)

        if session.successful_refreshes:
            return session.status(PollingState.TIMED_OUT, TIMED_OUT_MESSAGE)
        return session.status(
            PollingState.ERROR, NetworkError().message, NetworkError().code
        )

    async def _refresh(self, company_id: str) -> CompanyRecord:
        """Call the backend in a task of its own so cancellation can't abort it."""
        call = asyncio.ensure_future(self.remote_sync.refresh_company(company_id))
        call.add_done_callback(_consume_result)
        return await asyncio.shield(call)

    async def _apply(self, session: PollingSession, record: CompanyRecord) -> None:
        """
        Write a refresh result to the store.

        Results for a session that is no longer current are dropped. Once
        started, the write runs to completion even if the session is
        cancelled meanwhile, so the store never holds half an update.
        """
        if session is not self._session:
            logger.debug("Dropping refresh result for a cancelled %s session", session.label)
            return
        write = asyncio.ensure_future(self.store.apply_remote(record))
        write.add_done_callback(_consume_result)
        self._background.add(write)
        write.add_done_callback(self._background.discard)
        await asyncio.shield(write)

    async def _finish(self, session: PollingSession, status: PollingStatus) -> None:
        if session.is_finished:
            return
        self._record_final(session, status)
        await self._emit(status)

    def _record_final(self, session: PollingSession, status: PollingStatus) -> None:
        session.final_status = status
        polling_sessions_total.labels(state=status.state.value).inc()
        logger.info(
            "Polling for company %s (%s) ended %s after %d attempt(s)",
            session.company_id,
            session.label,
            status.state,
            session.attempt,
        )

    async def _emit(self, status: PollingStatus) -> None:
        self._notify(status)
        await self.event_bus.publish(PollingStatusChanged(status))

    def _notify(self, status: PollingStatus) -> None:
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception:  # pylint: disable=broad-exception-caught
                logger.error("Polling status listener failed", exc_info=True)

    def _publish_in_background(self, status: PollingStatus) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to publish on; listeners have already been told
            return
        task = loop.create_task(self.event_bus.publish(PollingStatusChanged(status)))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
