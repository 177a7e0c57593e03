"""
Seat domain services.

Pure seat rules. Each check raises the matching domain exception so
callers never reach the network with a mutation that is already known
to be invalid.
"""
from typing import Iterable, Tuple

from core.domain.exceptions import (
    CapacityExceededError,
    NotAuthorizedError,
    SelfLockViolationError,
)
from core.domain.value_objects import User
from subscriptions.domain.company import CompanyRecord


class SeatPolicy:
    """Domain service for seat rules."""

    @staticmethod
    def check_can_manage(actor: User) -> None:
        """
        Only administrators may change seats.

        Args:
            actor: Acting user

        Raises:
            NotAuthorizedError: If the actor is not an administrator
        """
        if not actor.is_admin:
            raise NotAuthorizedError("Only administrators can manage seats")

    @staticmethod
    def check_capacity(record: CompanyRecord, seated_count: int) -> None:
        """
        Reject seated sets larger than the plan allows.

        Args:
            record: Current company record
            seated_count: Size of the proposed seated set

        Raises:
            CapacityExceededError: If the set would not fit
        """
        if seated_count > record.max_seats:
            raise CapacityExceededError(
                f"No available seats. Your plan includes {record.max_seats} seats. "
                "Please upgrade your plan."
            )

    @staticmethod
    def other_seated_admins(record: CompanyRecord, actor: User) -> Tuple[str, ...]:
        """
        Seated administrators other than the actor.

        Args:
            record: Current company record
            actor: Acting user

        Returns:
            Tuple of user IDs
        """
        return tuple(uid for uid in record.seated_admin_ids() if uid != actor.id)

    @staticmethod
    def check_self_revoke(record: CompanyRecord, actor: User, target_user_id: str) -> None:
        """
        The only seated admin may not remove their own seat.

        Revoking a *different* admin is always allowed.

        Args:
            record: Current company record
            actor: Acting user
            target_user_id: User whose seat is being removed

        Raises:
            SelfLockViolationError: If the actor would lock every admin out
        """
        if target_user_id != actor.id or not record.is_seated(actor.id):
            return
        if not SeatPolicy.other_seated_admins(record, actor):
            raise SelfLockViolationError()

    @staticmethod
    def final_seat_order(
        record: CompanyRecord, seated_user_ids_final: Iterable[str], actor: User
    ) -> Tuple[str, ...]:
        """
        Deterministic seated set for a save operation.

        Users who keep their seat keep their position; newly seated users
        follow in sorted order. An administrator performing the save is
        always included.

        Args:
            record: Current company record
            seated_user_ids_final: Seated set chosen by the caller
            actor: Acting user

        Returns:
            Seated users in seating order
        """
        final = set(seated_user_ids_final)
        if actor.is_admin:
            final.add(actor.id)
        kept = tuple(uid for uid in record.seated_user_ids if uid in final)
        added = tuple(sorted(final.difference(kept)))
        return kept + added
