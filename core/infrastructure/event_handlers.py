"""
Event handlers for domain events.

These handlers process domain events for side effects that are the same
for every app, such as audit logging.
"""

import logging

from core.domain.events import DomainEvent, EventHandler

logger = logging.getLogger("core.audit")


class AuditLogEventHandler(EventHandler):
    """
    Event handler for audit logging.

    Writes every domain event to the structured audit log.
    """

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for audit logging.

        Args:
            event: Domain event to log
        """
        logger.info(
            "Audit log: %s - %s",
            event.event_type,
            event.aggregate_id,
            extra=event.to_dict(),
        )
