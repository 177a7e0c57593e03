"""
Serializers for company entitlement API endpoints.
"""

from rest_framework import serializers

from activations.application.commands.record_payment_outcome import PaymentOutcome


class SeatTargetRequestSerializer(serializers.Serializer):
    """Serializer for grant and revoke seat requests."""

    target_user_id = serializers.CharField(required=True, max_length=255)


class CommitSeatsRequestSerializer(serializers.Serializer):
    """Serializer for saving a complete seated set."""

    seated_user_ids = serializers.ListField(
        child=serializers.CharField(max_length=255), allow_empty=True
    )


class PaymentOutcomeRequestSerializer(serializers.Serializer):
    """Serializer for payment processor callbacks."""

    outcome = serializers.ChoiceField(choices=[outcome.value for outcome in PaymentOutcome])
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    amount_due = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )


class CompanySubscriptionSerializer(serializers.Serializer):
    """Serializer for CompanySubscriptionDTO."""

    company_id = serializers.CharField()
    subscription_status = serializers.CharField()
    subscription_plan = serializers.CharField(allow_null=True)
    max_seats = serializers.IntegerField()
    seated_user_ids = serializers.ListField(child=serializers.CharField())
    available_seats = serializers.IntegerField()
    grace_started_at = serializers.DateTimeField(allow_null=True)
    trial_ends_at = serializers.DateTimeField(allow_null=True)
    confirmed = serializers.BooleanField()
    version = serializers.IntegerField()


class AccessDecisionSerializer(serializers.Serializer):
    """Serializer for AccessDecisionDTO."""

    allowed = serializers.BooleanField()
    reason = serializers.CharField(allow_null=True)
    title = serializers.CharField(allow_blank=True)
    message = serializers.CharField(allow_blank=True)
    show_grace_banner = serializers.BooleanField()
    grace_days_remaining = serializers.IntegerField(allow_null=True)


class EntitlementResponseSerializer(serializers.Serializer):
    """Serializer for the entitlement view of the acting user."""

    company = CompanySubscriptionSerializer(allow_null=True)
    decision = AccessDecisionSerializer()
    source = serializers.CharField()
    stale = serializers.BooleanField()


class PollingStatusSerializer(serializers.Serializer):
    """Serializer for PollingStatusDTO."""

    state = serializers.CharField()
    attempts = serializers.IntegerField()
    max_attempts = serializers.IntegerField()
    message = serializers.CharField(allow_blank=True)
    error_code = serializers.CharField(allow_null=True)


class SeatChangeResponseSerializer(serializers.Serializer):
    """Serializer for seat change responses."""

    action = serializers.CharField()
    target_user_id = serializers.CharField(allow_null=True)
    company = CompanySubscriptionSerializer()
    decision = AccessDecisionSerializer()
    removal_candidate = serializers.CharField(allow_null=True)
    confirmation = PollingStatusSerializer(allow_null=True)
    message = serializers.CharField()


class PaymentOutcomeResponseSerializer(serializers.Serializer):
    """Serializer for payment outcome responses."""

    outcome = serializers.CharField()
    confirmation = PollingStatusSerializer(allow_null=True)
    decision = AccessDecisionSerializer()
    message = serializers.CharField(allow_blank=True)
