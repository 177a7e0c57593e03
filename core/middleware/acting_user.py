"""
Acting user middleware.

Identity is established upstream (API gateway / mobile session); this
middleware only reads the forwarded user headers for company APIs and
attaches the resulting User value object to the request.
"""

import logging
from typing import Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.deprecation import MiddlewareMixin

from core.domain.value_objects import User, UserRole

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "yes"}


class ActingUserMiddleware(MiddlewareMixin):
    """
    Middleware resolving the acting user for company APIs.

    This middleware:
    1. Requires the user ID header on /api/v1/companies/*
    2. Parses role and company-admin flag
    3. Returns 401 if the user cannot be identified
    """

    protected_prefix = "/api/v1/companies/"

    def process_request(self, request: HttpRequest) -> Optional[HttpResponse]:
        """
        Process request and attach the acting user.

        Args:
            request: HTTP request

        Returns:
            HttpResponse with 401 if identification fails, None otherwise
        """
        request.acting_user = None  # type: ignore
        if not request.path.startswith(self.protected_prefix):
            return None

        user_id = request.headers.get(getattr(settings, "USER_ID_HEADER", "X-User-ID"), "").strip()
        if not user_id:
            return JsonResponse(
                {
                    "error": {
                        "code": "UNAUTHENTICATED",
                        "message": "Missing user ID. Provide X-User-ID header.",
                    }
                },
                status=401,
            )

        role = self._parse_role(
            request.headers.get(getattr(settings, "USER_ROLE_HEADER", "X-User-Role"))
        )
        is_company_admin = (
            request.headers.get(getattr(settings, "COMPANY_ADMIN_HEADER", "X-Company-Admin"), "")
            .strip()
            .lower()
            in TRUE_VALUES
        )

        request.acting_user = User(  # type: ignore
            id=user_id, role=role, is_company_admin=is_company_admin
        )
        return None

    @staticmethod
    def _parse_role(raw: Optional[str]) -> UserRole:
        """
        Parse the role header, defaulting to field crew.

        Args:
            raw: Header value

        Returns:
            UserRole
        """
        if not raw:
            return UserRole.FIELD_CREW
        try:
            return UserRole(raw.strip())
        except ValueError:
            logger.warning("Unknown user role header: %s", raw)
            return UserRole.FIELD_CREW
