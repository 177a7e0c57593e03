"""
Unit tests for the HTTP RemoteSync adapter.
"""
from unittest.mock import Mock

import pytest
import requests

from core.config import EntitlementSettings, RemoteSyncSettings
from core.domain.exceptions import BackendRejectedError, CompanyNotFoundError, NetworkError
from core.domain.value_objects import SubscriptionStatus
from subscriptions.infrastructure.remote_sync.http_remote_sync import HttpRemoteSync

PAYLOAD = {
    "company_id": "c1",
    "subscription_status": "active",
    "subscription_plan": "starter",
    "max_seats": 3,
    "seated_employee_ids": ["admin-1"],
    "admin_ids": ["admin-1"],
}


def make_response(status_code=200, json_body=None, json_error=False):
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = json_body
    return response


def make_adapter(response=None, error=None):
    session = requests.Session()
    session.request = Mock(return_value=response, side_effect=error)
    config = RemoteSyncSettings(base_url="http://billing.test/api/", api_token="secret")
    return HttpRemoteSync(config, session=session), session


@pytest.mark.asyncio
class TestHttpRemoteSync:
    """Tests for HttpRemoteSync."""

    async def test_refresh_company(self):
        """Test refresh fetches and maps the company."""
        adapter, session = make_adapter(make_response(json_body=PAYLOAD))

        record = await adapter.refresh_company("c1")

        assert record.subscription_status == SubscriptionStatus.ACTIVE
        assert record.seated_user_ids == ("admin-1",)
        session.request.assert_called_once_with(
            "GET", "http://billing.test/api/companies/c1", timeout=10.0
        )
        assert session.headers["Authorization"] == "Bearer secret"

    async def test_update_seated_employees(self):
        """Test the full seated set is sent as a PUT."""
        body = {**PAYLOAD, "seated_employee_ids": ["admin-1", "u2"]}
        adapter, session = make_adapter(make_response(json_body=body))

        record = await adapter.update_seated_employees("c1", ["admin-1", "u2"])

        assert record.seated_user_ids == ("admin-1", "u2")
        session.request.assert_called_once_with(
            "PUT",
            "http://billing.test/api/companies/c1/seated-employees",
            timeout=10.0,
            json={"seated_employee_ids": ["admin-1", "u2"]},
        )

    async def test_connection_error(self):
        """Test transport failures map to NetworkError."""
        adapter, _ = make_adapter(error=requests.exceptions.ConnectionError("refused"))
        with pytest.raises(NetworkError):
            await adapter.refresh_company("c1")

    async def test_timeout(self):
        """Test timeouts map to NetworkError."""
        adapter, _ = make_adapter(error=requests.exceptions.Timeout("slow"))
        with pytest.raises(NetworkError):
            await adapter.refresh_company("c1")

    async def test_server_error(self):
        """Test 5xx responses are transient."""
        adapter, _ = make_adapter(make_response(503))
        with pytest.raises(NetworkError):
            await adapter.refresh_company("c1")

    async def test_not_found(self):
        """Test 404 maps to CompanyNotFoundError."""
        adapter, _ = make_adapter(make_response(404))
        with pytest.raises(CompanyNotFoundError):
            await adapter.refresh_company("c1")

    @pytest.mark.parametrize("status_code", [402, 403, 409, 410, 422])
    async def test_rejection(self, status_code):
        """Test authoritative refusals map to BackendRejectedError."""
        adapter, _ = make_adapter(
            make_response(status_code, {"error": {"message": "Seat limit reached"}})
        )
        with pytest.raises(BackendRejectedError) as exc_info:
            await adapter.update_seated_employees("c1", ["a"])
        assert exc_info.value.message == "Seat limit reached"

    async def test_rejection_without_body(self):
        """Test refusals without a JSON body get a generic message."""
        adapter, _ = make_adapter(make_response(409, json_error=True))
        with pytest.raises(BackendRejectedError, match="409"):
            await adapter.update_seated_employees("c1", ["a"])

    async def test_invalid_json(self):
        """Test undecodable success bodies are transient."""
        adapter, _ = make_adapter(make_response(200, json_error=True))
        with pytest.raises(NetworkError):
            await adapter.refresh_company("c1")

    async def test_malformed_payload(self):
        """Test unmappable payloads are transient."""
        adapter, _ = make_adapter(make_response(json_body={"company_id": "c1"}))
        with pytest.raises(NetworkError, match="Malformed"):
            await adapter.refresh_company("c1")


class TestFromSettings:
    """Tests for HttpRemoteSync.from_settings."""

    def test_requires_remote_settings(self):
        """Test a missing REMOTE_SYNC block is a configuration error."""
        with pytest.raises(ValueError, match="REMOTE_SYNC"):
            HttpRemoteSync.from_settings(EntitlementSettings())

    def test_reads_django_settings(self):
        """Test the test settings configure the adapter."""
        adapter = HttpRemoteSync.from_settings()
        assert adapter.config.base_url == "http://billing.test/api"
        assert adapter.config.timeout_seconds == 1.0
