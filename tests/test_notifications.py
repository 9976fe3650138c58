"""
Tests for ticket delivery: QR rendering, email layout and the dispatcher.
"""

import pytest

from ticketing.core.config import Settings
from ticketing.services.interfaces.notifier import TicketNotice
from ticketing.services.notification_service import (
    EmailNotifier,
    NotificationDispatcher,
    build_ticket_email,
    render_qr_png,
)

SUMMARY = {"id": 7, "title": "Rooftop Jazz", "date": "2026-12-01T20:00:00", "location": "Online"}


def _notices(count: int = 2) -> list[TicketNotice]:
    return [
        TicketNotice(ticket_id=f"ticket-{i}", event_id=7, holder_name="Fan One", status="paid")
        for i in range(count)
    ]


class ExplodingNotifier:
    def __init__(self):
        self.calls = 0

    async def send(self, recipient, event_summary, tickets):
        self.calls += 1
        raise ConnectionError("smtp down")


def test_notice_scan_payload():
    assert _notices(1)[0].scan_payload == "7-ticket-0"


def test_render_qr_png():
    png = render_qr_png("7-ticket-0")
    assert png.startswith(b"\x89PNG")


def test_ticket_email_has_one_qr_per_ticket():
    message = build_ticket_email("tickets@example.com", "fan@example.com", SUMMARY, _notices(3))

    assert message["Subject"] == "Tickets confirmed: Rooftop Jazz"
    assert message["To"] == "fan@example.com"
    images = [part for part in message.walk() if part.get_content_type() == "image/png"]
    assert len(images) == 3

    html = next(part for part in message.walk() if part.get_content_type() == "text/html")
    assert "Rooftop Jazz" in html.get_content()
    plain = next(part for part in message.walk() if part.get_content_type() == "text/plain")
    assert "ticket-2" in plain.get_content()


@pytest.mark.asyncio
async def test_email_notifier_skips_without_smtp():
    notifier = EmailNotifier(Settings(SMTP_HOST=""))
    assert await notifier.send("fan@example.com", SUMMARY, _notices(1)) is False


@pytest.mark.asyncio
async def test_dispatch_delivers_in_background(notifier):
    dispatcher = NotificationDispatcher(notifier, enabled=True)

    task = dispatcher.dispatch(_notices(2), "fan@example.com", SUMMARY)
    assert task is not None
    await task

    assert dispatcher.pending == 0
    recipient, summary, notices = notifier.sent[0]
    assert recipient == "fan@example.com"
    assert [n.ticket_id for n in notices] == ["ticket-0", "ticket-1"]


@pytest.mark.asyncio
async def test_delivery_failure_is_swallowed():
    failing = ExplodingNotifier()
    dispatcher = NotificationDispatcher(failing, enabled=True)

    task = dispatcher.dispatch(_notices(1), "fan@example.com", SUMMARY)
    await task

    assert failing.calls == 1
    assert task.exception() is None
    assert dispatcher.pending == 0


@pytest.mark.asyncio
async def test_dispatch_skipped_when_disabled(notifier):
    dispatcher = NotificationDispatcher(notifier, enabled=False)
    assert dispatcher.dispatch(_notices(1), "fan@example.com", SUMMARY) is None
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_dispatch_skipped_without_recipient(notifier):
    dispatcher = NotificationDispatcher(notifier, enabled=True)
    assert dispatcher.dispatch(_notices(1), None, SUMMARY) is None
    assert dispatcher.dispatch([], "fan@example.com", SUMMARY) is None


@pytest.mark.asyncio
async def test_drain_waits_for_pending(notifier):
    dispatcher = NotificationDispatcher(notifier, enabled=True)
    dispatcher.dispatch(_notices(1), "a@example.com", SUMMARY)
    dispatcher.dispatch(_notices(1), "b@example.com", SUMMARY)

    await dispatcher.drain()

    assert sorted(r for r, _, _ in notifier.sent) == ["a@example.com", "b@example.com"]
