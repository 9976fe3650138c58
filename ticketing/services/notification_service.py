"""
Ticket delivery: QR code rendering, email composition and the dispatcher
that runs delivery off the request path.

Issuance hands freshly created tickets to ``NotificationDispatcher.dispatch``
and returns immediately. Delivery runs as a detached asyncio task; any
failure is logged and counted, never raised back into issuance. A ticket
exists whether or not its email arrived.
"""

import asyncio
import io
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid
from functools import lru_cache
from html import escape
from typing import Iterable, Optional

import qrcode

from ticketing.core.config import Settings, get_settings
from ticketing.core.logging import get_logger
from ticketing.core.metrics import record_notification
from ticketing.services.interfaces.notifier import TicketNotice, TicketNotifier

logger = get_logger(__name__)


def render_qr_png(payload: str) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.ERROR_CORRECT_M,
        box_size=8,
        border=4,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def build_ticket_email(
    sender: str,
    recipient: str,
    event_summary: dict,
    tickets: list[TicketNotice],
) -> EmailMessage:
    """Multipart email: plain text fallback plus HTML with inline QR images."""
    title = event_summary.get("title", "your event")
    holder = tickets[0].holder_name if tickets else "Fan"

    message = EmailMessage()
    message["Subject"] = f"Tickets confirmed: {title}"
    message["From"] = sender
    message["To"] = recipient

    lines = [
        f"Hi {holder},",
        "",
        f"Your {len(tickets)} ticket(s) for {title} are confirmed.",
        f"Date: {event_summary.get('date')}",
        f"Location: {event_summary.get('location')}",
        "",
    ]
    lines += [f"Ticket #{i}: {t.ticket_id}" for i, t in enumerate(tickets, start=1)]
    message.set_content("\n".join(lines))

    cids = [make_msgid(domain="tickets.local") for _ in tickets]
    blocks = "".join(
        f'<div style="margin:24px 0;text-align:center">'
        f'<p><strong>Ticket #{i}</strong></p>'
        f'<img src="cid:{cid[1:-1]}" alt="Ticket QR code" width="200" height="200"/>'
        f'<p style="font-size:10px;color:#666">ID: {escape(t.ticket_id)}</p></div>'
        for i, (t, cid) in enumerate(zip(tickets, cids), start=1)
    )
    html = (
        f"<h1>You're going!</h1>"
        f"<p>Hi <strong>{escape(holder)}</strong>,</p>"
        f"<p>Your <strong>{len(tickets)}</strong> ticket(s) for "
        f"<strong>{escape(title)}</strong> are confirmed.</p>"
        f"<p>Date: {escape(str(event_summary.get('date')))}<br>"
        f"Location: {escape(str(event_summary.get('location')))}</p>"
        f"{blocks}"
    )
    message.add_alternative(html, subtype="html")

    html_part = message.get_payload()[-1]
    for ticket, cid in zip(tickets, cids):
        html_part.add_related(
            render_qr_png(ticket.scan_payload),
            maintype="image",
            subtype="png",
            cid=cid,
            filename=f"ticket-{ticket.ticket_id}.png",
        )
    return message


class EmailNotifier(TicketNotifier):
    """Sends ticket emails over SMTP; skipped when no SMTP host is configured."""

    def __init__(self, settings: Settings):
        self._settings = settings

    async def send(self, recipient: str, event_summary: dict, tickets: list[TicketNotice]) -> bool:
        if not self._settings.SMTP_HOST:
            logger.info("ticket_email_skipped", reason="smtp_not_configured", recipient=recipient)
            return False

        message = build_ticket_email(self._settings.MAIL_SENDER, recipient, event_summary, tickets)
        # smtplib blocks; keep it off the event loop
        await asyncio.to_thread(self._deliver, message)
        logger.info("ticket_email_sent", recipient=recipient, tickets=len(tickets))
        return True

    def _deliver(self, message: EmailMessage) -> None:
        s = self._settings
        with smtplib.SMTP(s.SMTP_HOST, s.SMTP_PORT, timeout=30) as smtp:
            if s.SMTP_USE_TLS:
                smtp.starttls()
            if s.SMTP_USER:
                smtp.login(s.SMTP_USER, s.SMTP_PASSWORD)
            smtp.send_message(message)


class NotificationDispatcher:
    """Fire-and-forget ticket delivery with logged, swallowed failures."""

    def __init__(self, notifier: TicketNotifier, enabled: bool = True):
        self._notifier = notifier
        self._enabled = enabled
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(
        self,
        tickets: Iterable,
        recipient: Optional[str],
        event_summary: dict,
    ) -> Optional[asyncio.Task]:
        """Schedule delivery and return at once; the task never raises."""
        notices = [t if isinstance(t, TicketNotice) else TicketNotice.from_ticket(t) for t in tickets]
        if not self._enabled or not recipient or not notices:
            logger.info(
                "ticket_notification_skipped",
                enabled=self._enabled,
                has_recipient=bool(recipient),
                tickets=len(notices),
            )
            record_notification("skipped")
            return None

        task = asyncio.create_task(self._deliver(recipient, event_summary, notices))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _deliver(self, recipient: str, event_summary: dict, notices: list[TicketNotice]) -> None:
        try:
            sent = await self._notifier.send(recipient, event_summary, notices)
        except Exception as e:
            logger.error(
                "ticket_notification_failed",
                recipient=recipient,
                event_id=event_summary.get("id"),
                ticket_ids=[n.ticket_id for n in notices],
                error=str(e),
            )
            record_notification("failed")
            return
        record_notification("sent" if sent else "skipped")

    async def drain(self, timeout: float = 10.0) -> None:
        """Wait for in-flight deliveries (shutdown)."""
        if not self._tasks:
            return
        logger.info("notifications_draining", pending=len(self._tasks))
        await asyncio.wait(set(self._tasks), timeout=timeout)


@lru_cache()
def get_dispatcher() -> NotificationDispatcher:
    settings = get_settings()
    return NotificationDispatcher(EmailNotifier(settings), enabled=settings.NOTIFICATIONS_ENABLED)
