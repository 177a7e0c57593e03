"""
HTTP implementation of the RemoteSync port.

Talks to the billing backend's REST API with ``requests``; blocking calls
run in a worker thread via ``sync_to_async``.
"""
import logging
import time
from typing import Any, Dict, List, Optional

import requests
from asgiref.sync import sync_to_async

from core.config import EntitlementSettings, RemoteSyncSettings
from core.domain.exceptions import (
    BackendRejectedError,
    CompanyNotFoundError,
    NetworkError,
)
from core.instrumentation import Status, StatusCode, get_tracer
from core.metrics import remote_sync_duration_seconds, remote_sync_requests_total
from subscriptions.domain.company import CompanyRecord
from subscriptions.infrastructure.company_payload import MalformedPayloadError, to_domain
from subscriptions.ports.remote_sync import RemoteSync

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

# Authoritative refusals: retrying will not change the answer
REJECTION_STATUS_CODES = {402, 403, 409, 410, 422}


class HttpRemoteSync(RemoteSync):
    """RemoteSync backed by the billing backend's HTTP API."""

    def __init__(
        self,
        config: RemoteSyncSettings,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize adapter.

        Args:
            config: Backend connection settings
            session: Optional pre-configured requests session
        """
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/json",
                "Content-Type": "application/json",
                "User-Agent": "Entitlement-Service/1.0",
            }
        )
        if config.api_token:
            self.session.headers["Authorization"] = f"Bearer {config.api_token}"

    @classmethod
    def from_settings(cls, settings: Optional[EntitlementSettings] = None) -> "HttpRemoteSync":
        """
        Build an adapter from Django settings.

        Args:
            settings: Engine settings (read from Django when omitted)

        Returns:
            HttpRemoteSync instance
        """
        settings = settings or EntitlementSettings.from_django()
        if settings.remote_sync is None:
            raise ValueError("ENTITLEMENTS['REMOTE_SYNC'] is not configured")
        return cls(settings.remote_sync)

    def _company_url(self, company_id: str, suffix: str = "") -> str:
        return f"{self.config.base_url.rstrip('/')}/companies/{company_id}{suffix}"

    async def refresh_company(self, company_id: str) -> CompanyRecord:
        """
        Fetch the authoritative company record.

        Args:
            company_id: Company identifier

        Returns:
            CompanyRecord
        """
        payload = await self._call("refresh_company", "GET", self._company_url(company_id))
        return self._to_record(payload, company_id)

    async def update_seated_employees(
        self, company_id: str, seated_user_ids: List[str]
    ) -> CompanyRecord:
        """
        Replace the company's seated set.

        Args:
            company_id: Company identifier
            seated_user_ids: Complete seated set

        Returns:
            CompanyRecord after the update
        """
        payload = await self._call(
            "update_seated_employees",
            "PUT",
            self._company_url(company_id, "/seated-employees"),
            json={"seated_employee_ids": list(seated_user_ids)},
        )
        return self._to_record(payload, company_id)

    @staticmethod
    def _to_record(payload: Dict[str, Any], company_id: str) -> CompanyRecord:
        try:
            return to_domain(payload, company_id=company_id)
        except MalformedPayloadError as e:
            logger.error("Malformed company payload for %s: %s", company_id, e)
            raise NetworkError(f"Malformed response from billing backend: {e}") from e

    async def _call(self, operation: str, method: str, url: str, **kwargs) -> Dict[str, Any]:
        with tracer.start_as_current_span(f"remote_sync.{operation}") as span:
            span.set_attribute("http.method", method)
            span.set_attribute("http.url", url)
            start = time.time()
            try:
                payload = await sync_to_async(self._send, thread_sensitive=False)(
                    method, url, **kwargs
                )
            except Exception as e:
                remote_sync_requests_total.labels(
                    operation=operation, outcome=type(e).__name__
                ).inc()
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise
            finally:
                remote_sync_duration_seconds.labels(operation=operation).observe(
                    time.time() - start
                )
            remote_sync_requests_total.labels(operation=operation, outcome="ok").inc()
            return payload

    def _send(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.session.request(
                method, url, timeout=self.config.timeout_seconds, **kwargs
            )
        except requests.exceptions.RequestException as e:
            logger.warning("Billing backend unreachable: %s %s - %s", method, url, e)
            raise NetworkError(f"Failed to reach billing backend: {e}") from e

        if response.status_code == 404:
            raise CompanyNotFoundError(f"Company not found at {url}")
        if response.status_code in REJECTION_STATUS_CODES:
            logger.warning(
                "Billing backend rejected %s %s with %d", method, url, response.status_code
            )
            raise BackendRejectedError(self._error_message(response))
        if response.status_code >= 400:
            raise NetworkError(
                f"Billing backend returned {response.status_code} for {method} {url}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise NetworkError("Billing backend returned invalid JSON") from e

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return error["message"]
            if isinstance(error, str):
                return error
            if body.get("message"):
                return body["message"]
        return f"The billing backend rejected the request ({response.status_code})"
