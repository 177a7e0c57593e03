"""
Unit tests for the watch_activation management command.
"""
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from core.domain.value_objects import SubscriptionStatus
from subscriptions.infrastructure.remote_sync.http_remote_sync import HttpRemoteSync
from factories import COMPANY_ID, FakeRemoteSync, make_record


@pytest.fixture
def backend(monkeypatch):
    remote = FakeRemoteSync(make_record(status=SubscriptionStatus.ACTIVE))
    monkeypatch.setattr(HttpRemoteSync, "from_settings", classmethod(lambda cls, s=None: remote))
    return remote


class TestWatchActivationCommand:
    """Tests for watch_activation."""

    def test_payment_confirmed(self, backend):
        """Test a confirmed payment prints progress and succeeds."""
        grace = make_record(status=SubscriptionStatus.GRACE)
        backend.refresh_script = [grace, grace]
        out = StringIO()

        call_command("watch_activation", COMPANY_ID, "--user", "admin-1", stdout=out)

        output = out.getvalue()
        assert "[1/10] polling: Activating your subscription..." in output
        assert "Subscription activated" in output
        assert "Access for admin-1: allowed" in output

    def test_seat_timeout(self, backend):
        """Test a seat that never appears fails the command."""
        out = StringIO()

        with pytest.raises(CommandError, match="timed_out"):
            call_command(
                "watch_activation",
                COMPANY_ID,
                "--user",
                "u9",
                "--predicate",
                "seat",
                "--attempts",
                "2",
                "--interval",
                "0",
                stdout=out,
            )

        assert "[2/2] timed_out" in out.getvalue()
