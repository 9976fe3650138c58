"""
Ticket notifier interface.
The dispatcher owns scheduling and failure handling; a notifier only
delivers one batch of tickets to one recipient.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class TicketNotice:
    """Plain snapshot of a ticket, safe to use after the DB session is gone."""

    ticket_id: str
    event_id: int
    holder_name: str
    status: str

    @property
    def scan_payload(self) -> str:
        return f"{self.event_id}-{self.ticket_id}"

    @classmethod
    def from_ticket(cls, ticket) -> "TicketNotice":
        return cls(
            ticket_id=ticket.id,
            event_id=ticket.event_id,
            holder_name=ticket.holder_name,
            status=ticket.status,
        )


class TicketNotifier(ABC):
    @abstractmethod
    async def send(self, recipient: str, event_summary: dict, tickets: list[TicketNotice]) -> bool:
        """
        Deliver tickets to ``recipient``.

        Returns:
            True if delivered, False if delivery was skipped
        """
        pass
