"""
Unit tests for company payload mapping.
"""
from datetime import datetime, timezone

import pytest

from core.domain.value_objects import SubscriptionPlan, SubscriptionStatus
from subscriptions.infrastructure.company_payload import (
    MalformedPayloadError,
    to_domain,
    to_payload,
)


class TestToDomain:
    """Tests for to_domain."""

    def test_full_payload(self):
        """Test a complete backend payload maps to a record."""
        record = to_domain(
            {
                "company_id": "c1",
                "subscription_status": "grace",
                "subscription_plan": "team",
                "max_seats": 5,
                "seated_employee_ids": ["u1", 2],
                "admin_ids": ["u1"],
                "grace_started_at": "2026-03-08T09:00:00Z",
            }
        )
        assert record.company_id == "c1"
        assert record.subscription_status == SubscriptionStatus.GRACE
        assert record.subscription_plan == SubscriptionPlan.TEAM
        assert record.seated_user_ids == ("u1", "2")
        assert record.is_admin("u1")
        assert record.grace_started_at == datetime(2026, 3, 8, 9, 0, tzinfo=timezone.utc)

    def test_processor_status_spellings(self):
        """Test processor spellings are normalised."""
        assert to_domain(
            {"company_id": "c1", "subscription_status": "trialing", "max_seats": 3}
        ).subscription_status == SubscriptionStatus.TRIAL
        assert to_domain(
            {"company_id": "c1", "subscription_status": "Canceled", "max_seats": 3}
        ).subscription_status == SubscriptionStatus.CANCELLED

    def test_stale_grace_start_dropped(self):
        """Test a grace start left over after grace is ignored."""
        record = to_domain(
            {
                "company_id": "c1",
                "subscription_status": "active",
                "max_seats": 3,
                "grace_started_at": "2026-03-08T09:00:00",
            }
        )
        assert record.grace_started_at is None

    def test_missing_max_seats_uses_plan(self):
        """Test max seats default to the plan's seats."""
        record = to_domain(
            {"id": "c1", "subscription_status": "active", "subscription_plan": "business"}
        )
        assert record.company_id == "c1"
        assert record.max_seats == 10

    def test_fallback_company_id(self):
        """Test the caller's company ID fills a missing one."""
        record = to_domain({"subscription_status": "active", "max_seats": 1}, company_id="c9")
        assert record.company_id == "c9"

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            {"company_id": "c1"},
            {"company_id": "c1", "subscription_status": "paused", "max_seats": 1},
            {"company_id": "c1", "subscription_status": "active", "max_seats": "many"},
            {"company_id": "c1", "subscription_status": "grace", "max_seats": 1},
            {
                "company_id": "c1",
                "subscription_status": "trial",
                "max_seats": 1,
                "trial_end_date": "tomorrow",
            },
        ],
    )
    def test_malformed(self, payload):
        """Test malformed payloads raise MalformedPayloadError."""
        with pytest.raises(MalformedPayloadError):
            to_domain(payload)


class TestToPayload:
    """Tests for to_payload."""

    def test_round_trip(self):
        """Test a record survives conversion to the payload shape and back."""
        record = to_domain(
            {
                "company_id": "c1",
                "subscription_status": "trial",
                "max_seats": 3,
                "seated_employee_ids": ["b", "a"],
                "admin_ids": ["b", "a"],
                "trial_end_date": "2026-04-01T00:00:00+00:00",
            }
        )
        payload = to_payload(record)
        assert payload["seated_employee_ids"] == ["b", "a"]
        assert payload["admin_ids"] == ["a", "b"]
        assert to_domain(payload) == record
