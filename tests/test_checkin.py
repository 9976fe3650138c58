"""
Tests for door check-in: payload parsing, authorization and one-time use.
"""

import asyncio
import uuid

import pytest

from ticketing.core.errors import (
    AlreadyCheckedInError,
    AuthorizationError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)
from ticketing.services.checkin_service import (
    check_in,
    check_in_payload,
    format_scan_payload,
    parse_scan_payload,
)
from ticketing.services.ticket_service import issue_tickets


@pytest.fixture
def issue_free(db_session):
    async def _issue(event, user):
        tickets = await issue_tickets(
            db_session, event_id=event.id, user_id=user.id, holder_name=user.name
        )
        return tickets[0]

    return _issue


def test_parse_splits_on_first_separator():
    scan = parse_scan_payload("evt123-tkt-456")
    assert scan.event_id == "evt123"
    assert scan.ticket_id == "tkt-456"


def test_parse_uuid_ticket_id():
    ticket_id = str(uuid.uuid4())
    scan = parse_scan_payload(format_scan_payload(7, ticket_id))
    assert scan.event_id == "7"
    assert scan.ticket_id == ticket_id


@pytest.mark.parametrize("payload", ["noseparator", "-abc", "12-", "", "   ", None, 42, b"1-2"])
def test_parse_rejects_malformed(payload):
    with pytest.raises(ValidationError) as exc_info:
        parse_scan_payload(payload)
    assert exc_info.value.code == ErrorCode.INVALID_PAYLOAD


@pytest.mark.asyncio
async def test_owner_checks_in_once(db_session, organizer, fan, free_event, issue_free):
    ticket = await issue_free(free_event, fan)

    admitted = await check_in(
        db_session, event_id=free_event.id, ticket_id=ticket.id, requester=organizer
    )
    assert admitted.status == "checked-in"
    assert admitted.checked_in_at is not None

    with pytest.raises(AlreadyCheckedInError) as exc_info:
        await check_in(db_session, event_id=free_event.id, ticket_id=ticket.id, requester=organizer)
    assert exc_info.value.status_code == 409
    assert exc_info.value.code == ErrorCode.ALREADY_CHECKED_IN
    assert exc_info.value.ticket_id == ticket.id


@pytest.mark.asyncio
async def test_check_in_by_payload(db_session, organizer, fan, free_event, issue_free):
    ticket = await issue_free(free_event, fan)

    admitted = await check_in_payload(db_session, ticket.scan_payload, organizer)
    assert admitted.id == ticket.id
    assert admitted.status == "checked-in"


@pytest.mark.asyncio
async def test_payload_with_non_numeric_event(db_session, organizer):
    with pytest.raises(ValidationError) as exc_info:
        await check_in_payload(db_session, f"evt-{uuid.uuid4()}", organizer)
    assert exc_info.value.code == ErrorCode.INVALID_PAYLOAD


@pytest.mark.asyncio
@pytest.mark.parametrize("event_part", ["99999999999999999999999", "3000000000", "0"])
async def test_payload_with_out_of_range_event(db_session, organizer, event_part):
    with pytest.raises(ValidationError) as exc_info:
        await check_in_payload(db_session, f"{event_part}-{uuid.uuid4()}", organizer)
    assert exc_info.value.code == ErrorCode.INVALID_PAYLOAD


@pytest.mark.asyncio
async def test_any_organizer_may_scan(db_session, other_organizer, fan, free_event, issue_free):
    """Door staff accounts are organizers that do not own the event."""
    ticket = await issue_free(free_event, fan)

    admitted = await check_in(
        db_session, event_id=free_event.id, ticket_id=ticket.id, requester=other_organizer
    )
    assert admitted.status == "checked-in"


@pytest.mark.asyncio
async def test_fan_cannot_scan(db_session, organizer, fan, other_fan, free_event, issue_free):
    ticket = await issue_free(free_event, fan)

    with pytest.raises(AuthorizationError):
        await check_in(db_session, event_id=free_event.id, ticket_id=ticket.id, requester=other_fan)
    with pytest.raises(AuthorizationError):
        await check_in(db_session, event_id=free_event.id, ticket_id=ticket.id, requester=fan)

    # Still admissible afterwards
    ticket = await check_in_payload(db_session, ticket.scan_payload, organizer)
    assert ticket.status == "checked-in"


@pytest.mark.asyncio
async def test_unknown_ticket(db_session, organizer, free_event):
    with pytest.raises(NotFoundError) as exc_info:
        await check_in(
            db_session, event_id=free_event.id, ticket_id=str(uuid.uuid4()), requester=organizer
        )
    assert exc_info.value.code == ErrorCode.TICKET_NOT_FOUND


@pytest.mark.asyncio
async def test_ticket_from_another_event(db_session, organizer, fan, free_event, make_event, issue_free):
    ticket = await issue_free(free_event, fan)
    other_event = await make_event(title="Other Gig")

    with pytest.raises(NotFoundError) as exc_info:
        await check_in(db_session, event_id=other_event.id, ticket_id=ticket.id, requester=organizer)
    assert exc_info.value.code == ErrorCode.TICKET_NOT_FOUND


@pytest.mark.asyncio
async def test_unknown_event(db_session, organizer):
    with pytest.raises(NotFoundError) as exc_info:
        await check_in(db_session, event_id=999, ticket_id=str(uuid.uuid4()), requester=organizer)
    assert exc_info.value.code == ErrorCode.EVENT_NOT_FOUND


@pytest.mark.asyncio
async def test_concurrent_scans_admit_once(
    session_factory, organizer, other_organizer, fan, free_event, issue_free
):
    """Two scanners at two doors read the same ticket at the same moment."""
    ticket = await issue_free(free_event, fan)

    async def scan(staff):
        async with session_factory() as session:
            try:
                await check_in(session, event_id=free_event.id, ticket_id=ticket.id, requester=staff)
                return "admitted"
            except AlreadyCheckedInError:
                return "rejected"

    results = await asyncio.gather(scan(organizer), scan(other_organizer))
    assert sorted(results) == ["admitted", "rejected"]
