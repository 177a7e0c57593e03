"""
Unit tests for core value objects.
"""
import pytest

from core.domain.value_objects import (
    SubscriptionPlan,
    SubscriptionStatus,
    User,
    UserRole,
)


class TestSubscriptionStatus:
    """Tests for SubscriptionStatus."""

    def test_inactive_statuses(self):
        """Test only expired and cancelled are inactive."""
        inactive = {status for status in SubscriptionStatus if status.is_inactive}
        assert inactive == {SubscriptionStatus.EXPIRED, SubscriptionStatus.CANCELLED}

    def test_display_name(self):
        """Test display names."""
        assert SubscriptionStatus.GRACE.display_name == "Grace Period"
        assert SubscriptionStatus.ACTIVE.display_name == "Active"
        assert str(SubscriptionStatus.TRIAL) == "trial"


class TestSubscriptionPlan:
    """Tests for SubscriptionPlan."""

    def test_default_seats(self):
        """Test seats included with each plan."""
        assert SubscriptionPlan.STARTER.default_max_seats == 3
        assert SubscriptionPlan.TEAM.default_max_seats == 5
        assert SubscriptionPlan.BUSINESS.default_max_seats == 10

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("team", SubscriptionPlan.TEAM),
            ("BUSINESS", SubscriptionPlan.BUSINESS),
            ("trial", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parse(self, raw, expected):
        """Test lenient plan parsing."""
        assert SubscriptionPlan.parse(raw) == expected


class TestUser:
    """Tests for User value object."""

    def test_admin_by_role(self):
        """Test the admin role grants seat management."""
        assert User(id="u1", role=UserRole.ADMIN).is_admin is True

    def test_admin_by_company_flag(self):
        """Test the company admin flag grants seat management."""
        assert User(id="u1", role=UserRole.OFFICE_CREW, is_company_admin=True).is_admin is True

    def test_field_crew_is_not_admin(self):
        """Test the default user is not an admin."""
        user = User(id="u1")
        assert user.role == UserRole.FIELD_CREW
        assert user.is_admin is False

    def test_empty_id(self):
        """Test empty user IDs are rejected."""
        with pytest.raises(ValueError, match="User ID cannot be empty"):
            User(id="  ")

    def test_equality(self):
        """Test users compare by value."""
        assert User(id="u1") == User(id="u1")
        assert User(id="u1") != User(id="u1", role=UserRole.ADMIN)
