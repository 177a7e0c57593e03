"""
Pytest configuration and shared fixtures.
"""

import pytest

from core.config import EntitlementSettings
from core.domain.value_objects import User, UserRole
from core.infrastructure.events import InMemoryEventBus
from subscriptions.application.services.entitlement_session import EntitlementSession
from subscriptions.application.services.entitlement_store import EntitlementStore
from factories import COMPANY_ID, NOW, FakeRemoteSync, make_record


@pytest.fixture
def admin_user():
    """Fixture for the company administrator."""
    return User(id="admin-1", role=UserRole.ADMIN)


@pytest.fixture
def field_user():
    """Fixture for a field crew member."""
    return User(id="field-1", role=UserRole.FIELD_CREW)


@pytest.fixture
def active_record():
    """Fixture for an active company with one free seat."""
    return make_record(max_seats=3, seated=("admin-1", "field-1"))


@pytest.fixture
def remote_sync(active_record):
    """Fixture for the fake billing backend."""
    return FakeRemoteSync(active_record)


@pytest.fixture
def event_bus():
    """Fixture for a session event bus."""
    return InMemoryEventBus()


@pytest.fixture
def store(event_bus):
    """Fixture for an empty entitlement store."""
    return EntitlementStore(COMPANY_ID, event_bus)


@pytest.fixture
def fast_settings():
    """Fixture for settings with no wait between poll attempts."""
    return EntitlementSettings(poll_interval_ms=0, poll_max_attempts=10)


@pytest.fixture
def make_session(remote_sync, fast_settings):
    """Factory fixture for entitlement sessions."""

    def factory(user, **kwargs):
        kwargs.setdefault("settings", fast_settings)
        kwargs.setdefault("clock", lambda: NOW)
        return EntitlementSession(COMPANY_ID, user, remote_sync, **kwargs)

    return factory


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()
