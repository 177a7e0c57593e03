"""
Django management command to watch a company's activation from the terminal.

Runs one polling session against the billing backend and prints every
status update, e.g. after a checkout completed out of band.
"""

import asyncio
import logging

from django.core.management.base import BaseCommand, CommandError

from activations.domain.polling import PollingState, PollingStatus
from activations.domain.predicates import (
    payment_confirmed,
    payment_rejected,
    seat_assigned,
)
from core.config import EntitlementSettings
from core.domain.exceptions import DomainException
from core.domain.value_objects import User, UserRole
from subscriptions.application.services.entitlement_session import EntitlementSession
from subscriptions.infrastructure.remote_sync.http_remote_sync import HttpRemoteSync

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to poll a company's subscription until it is confirmed."""

    help = "Poll the billing backend until a company's payment or seat is confirmed"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument("company_id", help="Company to watch")
        parser.add_argument(
            "--user",
            default="cli",
            help="User ID to evaluate access for (and to wait on with --predicate seat)",
        )
        parser.add_argument(
            "--predicate",
            choices=["payment", "seat"],
            default="payment",
            help="Wait for an active subscription or for the user's seat",
        )
        parser.add_argument("--interval", type=int, help="Milliseconds between attempts")
        parser.add_argument("--attempts", type=int, help="Maximum number of attempts")

    def handle(self, *args, **options):
        """Execute the command."""
        try:
            settings = EntitlementSettings.from_django()
            remote_sync = HttpRemoteSync.from_settings(settings)
        except ValueError as e:
            raise CommandError(str(e)) from e

        user = User(id=options["user"], role=UserRole.ADMIN)
        session = EntitlementSession(options["company_id"], user, remote_sync, settings=settings)

        final = asyncio.run(self._watch(session, options))
        if final is None:
            raise CommandError("Polling did not start")

        if final.state == PollingState.SUCCEEDED:
            # pylint: disable=no-member
            self.stdout.write(self.style.SUCCESS(final.message))
        else:
            raise CommandError(f"{final.state.value}: {final.message}")

    async def _watch(self, session: EntitlementSession, options) -> PollingStatus:
        session.on_polling_status(self._print_status)
        try:
            try:
                await session.refresh()
            except DomainException as e:
                logger.warning("Initial refresh failed: %s", e.message)

            rejection = None
            if options["predicate"] == "seat":
                predicate = seat_assigned(session.user.id)
                label = "seat_assignment"
            else:
                predicate = payment_confirmed
                label = "payment"
                rejection = payment_rejected

            polling_session = session.poller.start_polling(
                predicate,
                rejection,
                label=label,
                interval_ms=options.get("interval"),
                max_attempts=options.get("attempts"),
            )
            final = await session.poller.wait(polling_session)
            decision = session.decision()
            self.stdout.write(
                f"Access for {session.user.id}: "
                f"{'allowed' if decision.allowed else decision.reason}"
            )
            return final
        finally:
            await session.close()

    def _print_status(self, status: PollingStatus) -> None:
        self.stdout.write(
            f"[{status.attempt}/{status.max_attempts}] {status.state.value}: {status.message}"
        )
