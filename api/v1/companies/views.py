"""
Company entitlement API views.

These endpoints are used by the field-service app to:
- Read the acting user's entitlement and access decision
- Grant, revoke and save seats
- Report payment outcomes and wait for activation
"""

from asgiref.sync import async_to_sync
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from activations.application.commands.record_payment_outcome import (
    PaymentOutcome,
    RecordPaymentOutcomeCommand,
)
from activations.application.handlers.payment_outcome_handler import PaymentOutcomeHandler
from api.v1.companies.serializers import (
    CommitSeatsRequestSerializer,
    EntitlementResponseSerializer,
    PaymentOutcomeRequestSerializer,
    PaymentOutcomeResponseSerializer,
    SeatChangeResponseSerializer,
    SeatTargetRequestSerializer,
)
from core.config import EntitlementSettings
from core.infrastructure.cache_adapters import DjangoCacheAdapter
from core.instrumentation import Status, StatusCode, get_tracer
from seats.application.commands.commit_seats import CommitSeatsCommand
from seats.application.commands.grant_seat import GrantSeatCommand
from seats.application.commands.revoke_seat import RevokeSeatCommand
from seats.application.handlers.seat_handlers import (
    CommitSeatsHandler,
    GrantSeatHandler,
    RevokeSeatHandler,
)
from subscriptions.application.handlers.get_entitlement_handler import GetEntitlementHandler
from subscriptions.application.queries.get_entitlement import GetEntitlementQuery
from subscriptions.application.services.entitlement_session import EntitlementSession
from subscriptions.application.services.snapshot_cache_service import SnapshotCacheService
from subscriptions.infrastructure.remote_sync.http_remote_sync import HttpRemoteSync
from subscriptions.ports.remote_sync import RemoteSync

tracer = get_tracer(__name__)

ACTING_USER_PARAMETERS = [
    OpenApiParameter(
        name="X-User-ID",
        type=str,
        location=OpenApiParameter.HEADER,
        required=True,
        description="Identifier of the signed-in user",
    ),
    OpenApiParameter(
        name="X-User-Role",
        type=str,
        location=OpenApiParameter.HEADER,
        required=False,
        description="Role of the signed-in user: admin, officeCrew or fieldCrew",
    ),
    OpenApiParameter(
        name="X-Company-Admin",
        type=bool,
        location=OpenApiParameter.HEADER,
        required=False,
        description="Whether the signed-in user is listed as a company admin",
    ),
]


def get_remote_sync() -> RemoteSync:
    """Billing backend adapter used by the views."""
    return HttpRemoteSync.from_settings()


def build_session(company_id: str, request: Request) -> EntitlementSession:
    """
    Build a request-scoped entitlement session for the acting user.

    Args:
        company_id: Company from the URL
        request: Request carrying ``acting_user``

    Returns:
        EntitlementSession
    """
    settings = EntitlementSettings.from_django()
    return EntitlementSession(
        company_id,
        request.acting_user,
        get_remote_sync(),
        settings=settings,
        cache_service=SnapshotCacheService(DjangoCacheAdapter(), ttl=settings.snapshot_cache_ttl),
    )


def _validation_error(serializer) -> Response:
    return Response({"error": serializer.errors}, status=status.HTTP_400_BAD_REQUEST)


class EntitlementView(APIView):
    """View for the acting user's entitlement."""

    @extend_schema(
        operation_id="get_entitlement",
        summary="Get Entitlement",
        description=(
            "Fetch the company's subscription and seat record from the billing backend "
            "and evaluate whether the acting user may use the app. If the backend is "
            "unreachable, the last cached record is returned and flagged stale."
        ),
        tags=["Entitlements"],
        parameters=ACTING_USER_PARAMETERS,
        responses={
            200: EntitlementResponseSerializer,
            401: {"description": "Missing acting user"},
            404: {"description": "Company not found"},
            502: {"description": "Billing backend unreachable and nothing cached"},
        },
    )
    def get(self, request: Request, company_id: str) -> Response:
        """Get entitlement."""
        return async_to_sync(self._handle_get)(request, company_id)

    async def _handle_get(self, request: Request, company_id: str) -> Response:
        with tracer.start_as_current_span("get_entitlement") as span:
            span.set_attribute("company.id", company_id)
            session = build_session(company_id, request)
            try:
                result = await GetEntitlementHandler(session).handle(
                    GetEntitlementQuery(company_id=company_id)
                )
            finally:
                await session.close()

            span.set_attribute("entitlement.allowed", result.decision.allowed)
            span.set_attribute("entitlement.stale", result.stale)
            span.set_status(Status(StatusCode.OK))
            return Response(EntitlementResponseSerializer(result).data, status=status.HTTP_200_OK)


class _SeatView(APIView):
    """Shared request flow for seat endpoints."""

    span_name = ""
    handler_class = None
    request_serializer_class = SeatTargetRequestSerializer

    def post(self, request: Request, company_id: str) -> Response:
        """Apply the seat change."""
        return async_to_sync(self._handle)(request, company_id)

    def build_command(self, company_id: str, data):
        raise NotImplementedError

    async def _handle(self, request: Request, company_id: str) -> Response:
        with tracer.start_as_current_span(self.span_name) as span:
            span.set_attribute("company.id", company_id)
            span.set_attribute("user.id", request.acting_user.id)

            serializer = self.request_serializer_class(data=request.data)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return _validation_error(serializer)

            command = self.build_command(company_id, serializer.validated_data)
            session = build_session(company_id, request)
            try:
                result = await self.handler_class(session).handle(command)
            finally:
                await session.close()

            if result.confirmation is not None:
                span.set_attribute("polling.state", result.confirmation.state)
            span.set_status(Status(StatusCode.OK))
            return Response(SeatChangeResponseSerializer(result).data, status=status.HTTP_200_OK)


SEAT_ERROR_RESPONSES = {
    400: {"description": "Bad Request"},
    401: {"description": "Missing acting user"},
    403: {"description": "Acting user is not an admin"},
    404: {"description": "Company not found"},
    409: {"description": "No seat available, or the only seated admin would lock themselves out"},
    422: {"description": "Billing backend rejected the change"},
    502: {"description": "Billing backend unreachable; nothing was changed"},
}


class GrantSeatView(_SeatView):
    """View for granting a seat."""

    span_name = "grant_seat"
    handler_class = GrantSeatHandler

    def build_command(self, company_id: str, data) -> GrantSeatCommand:
        return GrantSeatCommand(company_id=company_id, target_user_id=data["target_user_id"])

    @extend_schema(
        operation_id="grant_seat",
        summary="Grant Seat",
        description=(
            "Give a user one of the company's seats. The change is shown immediately "
            "and rolled back if the billing backend refuses it. Admins only."
        ),
        tags=["Seats"],
        parameters=ACTING_USER_PARAMETERS,
        request=SeatTargetRequestSerializer,
        responses={200: SeatChangeResponseSerializer, **SEAT_ERROR_RESPONSES},
    )
    def post(self, request: Request, company_id: str) -> Response:
        """Grant a seat."""
        return super().post(request, company_id)


class RevokeSeatView(_SeatView):
    """View for revoking a seat."""

    span_name = "revoke_seat"
    handler_class = RevokeSeatHandler

    def build_command(self, company_id: str, data) -> RevokeSeatCommand:
        return RevokeSeatCommand(company_id=company_id, target_user_id=data["target_user_id"])

    @extend_schema(
        operation_id="revoke_seat",
        summary="Revoke Seat",
        description=(
            "Take a seat away from a user. The only seated admin cannot revoke their "
            "own seat. Admins only."
        ),
        tags=["Seats"],
        parameters=ACTING_USER_PARAMETERS,
        request=SeatTargetRequestSerializer,
        responses={200: SeatChangeResponseSerializer, **SEAT_ERROR_RESPONSES},
    )
    def post(self, request: Request, company_id: str) -> Response:
        """Revoke a seat."""
        return super().post(request, company_id)


class CommitSeatsView(_SeatView):
    """View for saving the complete seated set."""

    span_name = "commit_seats"
    handler_class = CommitSeatsHandler
    request_serializer_class = CommitSeatsRequestSerializer

    def build_command(self, company_id: str, data) -> CommitSeatsCommand:
        return CommitSeatsCommand(company_id=company_id, seated_user_ids=data["seated_user_ids"])

    @extend_schema(
        operation_id="commit_seats",
        summary="Save Seats",
        description=(
            "Replace the company's seated set in one request. The acting admin always "
            "keeps their own seat. Admins only."
        ),
        tags=["Seats"],
        parameters=ACTING_USER_PARAMETERS,
        request=CommitSeatsRequestSerializer,
        responses={200: SeatChangeResponseSerializer, **SEAT_ERROR_RESPONSES},
    )
    def post(self, request: Request, company_id: str) -> Response:
        """Save seats."""
        return super().post(request, company_id)


class PaymentOutcomeView(APIView):
    """View for payment processor outcomes."""

    @extend_schema(
        operation_id="record_payment_outcome",
        summary="Record Payment Outcome",
        description=(
            "Report the result of a checkout. A completed payment starts confirmation "
            "polling against the billing backend and the response carries its final "
            "state. Canceled and failed payments change nothing."
        ),
        tags=["Payments"],
        parameters=ACTING_USER_PARAMETERS,
        request=PaymentOutcomeRequestSerializer,
        responses={
            200: PaymentOutcomeResponseSerializer,
            400: {"description": "Bad Request"},
            401: {"description": "Missing acting user"},
        },
    )
    def post(self, request: Request, company_id: str) -> Response:
        """Record payment outcome."""
        return async_to_sync(self._handle)(request, company_id)

    async def _handle(self, request: Request, company_id: str) -> Response:
        with tracer.start_as_current_span("record_payment_outcome") as span:
            span.set_attribute("company.id", company_id)

            serializer = PaymentOutcomeRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return _validation_error(serializer)

            command = RecordPaymentOutcomeCommand(
                company_id=company_id,
                outcome=PaymentOutcome(serializer.validated_data["outcome"]),
                reason=serializer.validated_data.get("reason"),
                amount_due=serializer.validated_data.get("amount_due"),
            )
            span.set_attribute("payment.outcome", command.outcome.value)

            session = build_session(company_id, request)
            try:
                result = await PaymentOutcomeHandler(session).handle(command)
            finally:
                await session.close()

            if result.confirmation is not None:
                span.set_attribute("polling.state", result.confirmation.state)
            span.set_status(Status(StatusCode.OK))
            return Response(
                PaymentOutcomeResponseSerializer(result).data, status=status.HTTP_200_OK
            )
