"""
URL configuration for company entitlement API endpoints.
"""

from django.urls import path

from api.v1.companies import views

app_name = "companies"

urlpatterns = [
    path(
        "<str:company_id>/entitlement",
        views.EntitlementView.as_view(),
        name="get-entitlement",
    ),
    path(
        "<str:company_id>/seats/grant",
        views.GrantSeatView.as_view(),
        name="grant-seat",
    ),
    path(
        "<str:company_id>/seats/revoke",
        views.RevokeSeatView.as_view(),
        name="revoke-seat",
    ),
    path(
        "<str:company_id>/seats/commit",
        views.CommitSeatsView.as_view(),
        name="commit-seats",
    ),
    path(
        "<str:company_id>/payment-events",
        views.PaymentOutcomeView.as_view(),
        name="record-payment-outcome",
    ),
]
