"""
Unit tests for PaymentOutcomeHandler.
"""
from decimal import Decimal

import pytest

from activations.application.commands.record_payment_outcome import (
    PaymentOutcome,
    RecordPaymentOutcomeCommand,
)
from activations.application.handlers.payment_outcome_handler import PaymentOutcomeHandler
from core.config import EntitlementSettings
from core.domain.exceptions import NetworkError
from core.domain.value_objects import SubscriptionStatus
from subscriptions.application.services.snapshot_cache_service import SnapshotCacheService
from factories import COMPANY_ID, DictCache, make_record


@pytest.mark.asyncio
class TestPaymentOutcomeHandler:
    """Tests for PaymentOutcomeHandler."""

    async def test_completed_payment_polls_until_active(
        self, make_session, admin_user, remote_sync
    ):
        """Test a completed checkout waits for the backend to activate."""
        grace = make_record(status=SubscriptionStatus.GRACE)
        active = make_record(status=SubscriptionStatus.ACTIVE)
        remote_sync.refresh_script = [grace, grace, active]
        session = make_session(admin_user)

        result = await PaymentOutcomeHandler(session).handle(
            RecordPaymentOutcomeCommand(COMPANY_ID, PaymentOutcome.COMPLETED)
        )

        assert result.outcome == "completed"
        assert result.confirmation.state == "succeeded"
        assert result.confirmation.attempts == 3
        assert result.decision.allowed is True
        await session.close()

    async def test_completed_payment_times_out(self, make_session, admin_user, remote_sync):
        """Test a slow backend reports a non-fatal timeout."""
        remote_sync.record = make_record(status=SubscriptionStatus.EXPIRED)
        session = make_session(admin_user)

        result = await PaymentOutcomeHandler(session).handle(
            RecordPaymentOutcomeCommand(COMPANY_ID, PaymentOutcome.COMPLETED)
        )

        assert result.confirmation.state == "timed_out"
        assert result.confirmation.attempts == 10
        assert len(remote_sync.refresh_calls) == 10
        await session.close()

    @pytest.mark.parametrize("outcome", [PaymentOutcome.CANCELED, PaymentOutcome.FAILED])
    async def test_unsuccessful_payment_does_not_poll(
        self, make_session, admin_user, remote_sync, outcome
    ):
        """Test only completed payments start polling."""
        session = make_session(admin_user)

        result = await PaymentOutcomeHandler(session).handle(
            RecordPaymentOutcomeCommand(COMPANY_ID, outcome, reason="Card declined")
        )

        assert result.confirmation is None
        assert remote_sync.refresh_calls == []
        assert session.poller.session is None

    async def test_failed_payment_reason(self, make_session, admin_user):
        """Test the processor's failure reason is passed through."""
        session = make_session(admin_user)

        result = await PaymentOutcomeHandler(session).handle(
            RecordPaymentOutcomeCommand(COMPANY_ID, PaymentOutcome.FAILED, reason="Card declined")
        )

        assert result.message == "Card declined"

    async def test_free_checkout_skips_polling(self, make_session, admin_user, remote_sync):
        """Test a fully discounted checkout can skip confirmation when enabled."""
        settings = EntitlementSettings(poll_interval_ms=0, free_checkout_skips_confirmation=True)
        session = make_session(admin_user, settings=settings)

        result = await PaymentOutcomeHandler(session).handle(
            RecordPaymentOutcomeCommand(
                COMPANY_ID, PaymentOutcome.COMPLETED, amount_due=Decimal("0.00")
            )
        )

        assert result.confirmation.state == "succeeded"
        assert remote_sync.refresh_calls == []

    async def test_free_checkout_polls_by_default(self, make_session, admin_user, remote_sync):
        """Test a fully discounted checkout still polls unless configured."""
        session = make_session(admin_user)

        result = await PaymentOutcomeHandler(session).handle(
            RecordPaymentOutcomeCommand(
                COMPANY_ID, PaymentOutcome.COMPLETED, amount_due=Decimal("0")
            )
        )

        assert result.confirmation.state == "succeeded"
        assert remote_sync.refresh_calls == [COMPANY_ID]
        await session.close()

    async def test_backend_cancellation_without_cache_is_rejected(
        self, make_session, admin_user, remote_sync
    ):
        """Test a cancelled subscription ends confirmation on the first attempt."""
        remote_sync.record = make_record(status=SubscriptionStatus.CANCELLED)
        session = make_session(admin_user)

        result = await PaymentOutcomeHandler(session).handle(
            RecordPaymentOutcomeCommand(COMPANY_ID, PaymentOutcome.COMPLETED)
        )

        assert result.confirmation.state == "rejected"
        assert result.confirmation.attempts == 1
        assert result.confirmation.error_code == "PAYMENT_REJECTED"
        assert remote_sync.refresh_calls == [COMPANY_ID]
        assert result.decision.allowed is False
        await session.close()

    async def test_backend_cancellation_with_cached_cancelled_record(
        self, make_session, admin_user, remote_sync
    ):
        """Test a cached cancelled record does not hide a backend cancellation."""
        cancelled = make_record(status=SubscriptionStatus.CANCELLED)
        service = SnapshotCacheService(DictCache())
        await service.set_company(cancelled)
        remote_sync.record = cancelled
        session = make_session(admin_user, cache_service=service)

        result = await PaymentOutcomeHandler(session).handle(
            RecordPaymentOutcomeCommand(COMPANY_ID, PaymentOutcome.COMPLETED)
        )

        assert result.confirmation.state == "rejected"
        assert result.confirmation.attempts == 1
        await session.close()

    async def test_cancellation_after_pending_attempts(
        self, make_session, admin_user, remote_sync
    ):
        """Test polling stops as soon as the backend turns the subscription down."""
        grace = make_record(status=SubscriptionStatus.GRACE)
        remote_sync.refresh_script = [grace, NetworkError(), grace]
        remote_sync.record = make_record(status=SubscriptionStatus.CANCELLED)
        session = make_session(admin_user)

        result = await PaymentOutcomeHandler(session).handle(
            RecordPaymentOutcomeCommand(COMPANY_ID, PaymentOutcome.COMPLETED)
        )

        assert result.confirmation.state == "rejected"
        assert result.confirmation.attempts == 4
        assert len(remote_sync.refresh_calls) == 4
        await session.close()
