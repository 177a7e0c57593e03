"""
Company payload mapping.

Converts between the billing backend's snake_case company payload and the
CompanyRecord entity. The same shape is used for the snapshot cache.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from django.utils.dateparse import parse_datetime

from core.domain.value_objects import SubscriptionPlan, SubscriptionStatus
from subscriptions.domain.company import CompanyRecord

# Processor spellings that show up in backend payloads
STATUS_ALIASES = {
    "trialing": SubscriptionStatus.TRIAL,
    "canceled": SubscriptionStatus.CANCELLED,
}


class MalformedPayloadError(ValueError):
    """Raised when a company payload cannot be mapped to a CompanyRecord."""


def _parse_timestamp(value: Any, field_name: str) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = parse_datetime(str(value))
        if parsed is None:
            raise MalformedPayloadError(f"Invalid timestamp in {field_name}: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_status(value: Any) -> SubscriptionStatus:
    if not value:
        raise MalformedPayloadError("subscription_status is required")
    normalized = str(value).strip().lower()
    if normalized in STATUS_ALIASES:
        return STATUS_ALIASES[normalized]
    try:
        return SubscriptionStatus(normalized)
    except ValueError as e:
        raise MalformedPayloadError(f"Unknown subscription_status: {value!r}") from e


def to_domain(payload: Dict[str, Any], company_id: Optional[str] = None) -> CompanyRecord:
    """
    Convert a backend payload to a CompanyRecord.

    A grace start left behind after the company has left grace is dropped.

    Args:
        payload: Decoded JSON object
        company_id: Fallback identity when the payload omits it

    Returns:
        CompanyRecord entity

    Raises:
        MalformedPayloadError: If required fields are missing or invalid
    """
    if not isinstance(payload, dict):
        raise MalformedPayloadError("Company payload must be an object")

    status = _parse_status(payload.get("subscription_status"))
    plan = SubscriptionPlan.parse(payload.get("subscription_plan"))

    raw_max_seats = payload.get("max_seats")
    try:
        max_seats = int(raw_max_seats) if raw_max_seats is not None else None
    except (TypeError, ValueError) as e:
        raise MalformedPayloadError(f"Invalid max_seats: {raw_max_seats!r}") from e

    grace_started_at = _parse_timestamp(payload.get("grace_started_at"), "grace_started_at")
    if status != SubscriptionStatus.GRACE:
        grace_started_at = None

    try:
        return CompanyRecord.create(
            company_id=str(payload.get("company_id") or payload.get("id") or company_id or ""),
            subscription_status=status,
            subscription_plan=plan,
            max_seats=max_seats,
            seated_user_ids=[str(uid) for uid in payload.get("seated_employee_ids") or []],
            admin_ids=[str(uid) for uid in payload.get("admin_ids") or []],
            grace_started_at=grace_started_at,
            trial_ends_at=_parse_timestamp(payload.get("trial_end_date"), "trial_end_date"),
        )
    except ValueError as e:
        raise MalformedPayloadError(str(e)) from e


def to_payload(record: CompanyRecord) -> Dict[str, Any]:
    """
    Convert a CompanyRecord to the backend payload shape.

    Args:
        record: CompanyRecord entity

    Returns:
        JSON-serializable dict
    """
    return {
        "company_id": record.company_id,
        "subscription_status": record.subscription_status.value,
        "subscription_plan": (
            record.subscription_plan.value if record.subscription_plan else None
        ),
        "max_seats": record.max_seats,
        "seated_employee_ids": list(record.seated_user_ids),
        "admin_ids": sorted(record.admin_ids),
        "grace_started_at": (
            record.grace_started_at.isoformat() if record.grace_started_at else None
        ),
        "trial_end_date": record.trial_ends_at.isoformat() if record.trial_ends_at else None,
    }
