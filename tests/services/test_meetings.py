from datetime import datetime, timedelta
from decimal import Decimal
from email.mime.base import MIMEBase
from typing import Any

import pytest

from tutoring.exceptions.booking import NotificationDeliveryError
from tutoring.services.ics import create_session_ics
from tutoring.services.meetings import MeetingProvider
from tutoring.utils.utc import utcfromtimestamp


START = utcfromtimestamp(1792591200)  # 2026-10-21 08:00 in Mexico City


class FakeCalendar:
    def __init__(self, link: str | None = "https://meet.google.com/abc-defg-hij", error: str | None = None) -> None:
        self.link = link
        self.error = error
        self.events: list[tuple[Any, ...]] = []
        self.deleted: list[str] = []

    async def create_event(
        self, summary: str, description: str, start: datetime, end: datetime, attendees: list[str]
    ) -> tuple[str, str | None]:
        if self.error:
            raise NotificationDeliveryError(self.error)
        self.events.append((summary, start, end, attendees))
        return "evt_1", self.link

    async def delete_event(self, event_id: str) -> None:
        if self.error:
            raise NotificationDeliveryError(self.error)
        self.deleted.append(event_id)


@pytest.fixture
def sent(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    emails: list[dict[str, Any]] = []

    async def send_email(recipient: str, title: str, body: str, *, attachments: list[MIMEBase] | None = None) -> None:
        emails.append({"recipient": recipient, "title": title, "body": body, "attachments": attachments or []})

    monkeypatch.setattr("tutoring.utils.email.send_email", send_email)
    return emails


async def create_meeting(provider: MeetingProvider) -> Any:
    return await provider.create_meeting(
        "Ana Torres", "ana@example.com", "Luis Ramirez", "luis@example.com", START, Decimal("1.5")
    )


async def test__create_meeting(sent: list[dict[str, Any]]) -> None:
    calendar = FakeCalendar()

    result = await create_meeting(MeetingProvider(calendar))

    assert result.notified
    assert result.error is None
    assert result.event_id == "evt_1"
    assert result.meeting_link == "https://meet.google.com/abc-defg-hij"

    [(summary, start, end, attendees)] = calendar.events
    assert "Ana Torres" in summary
    assert end - start == timedelta(hours=1.5)
    assert attendees == ["ana@example.com", "luis@example.com"]

    assert [email["recipient"] for email in sent] == ["ana@example.com", "luis@example.com"]
    for email in sent:
        assert "21.10.2026" in email["body"]
        assert "08:00" in email["body"]
        assert "https://meet.google.com/abc-defg-hij" in email["body"]
        assert len(email["attachments"]) == 1


async def test__create_meeting__without_calendar(sent: list[dict[str, Any]]) -> None:
    result = await create_meeting(MeetingProvider(None))

    assert result.notified
    assert result.event_id is None
    assert result.meeting_link is not None
    assert result.meeting_link.startswith("https://meet.jit.si/")
    assert len(sent) == 2


async def test__create_meeting__calendar_without_conference(sent: list[dict[str, Any]]) -> None:
    result = await create_meeting(MeetingProvider(FakeCalendar(link=None)))

    assert result.notified
    assert result.event_id == "evt_1"
    assert result.meeting_link is not None
    assert result.meeting_link.startswith("https://meet.jit.si/")


async def test__create_meeting__calendar_failure(sent: list[dict[str, Any]]) -> None:
    result = await create_meeting(MeetingProvider(FakeCalendar(error="calendar unavailable")))

    assert not result.notified
    assert result.error == "calendar unavailable"
    assert result.event_id is None
    assert result.meeting_link is None
    assert sent == []


async def test__create_meeting__smtp_not_configured() -> None:
    result = await create_meeting(MeetingProvider(FakeCalendar()))

    assert not result.notified
    assert result.event_id == "evt_1"
    assert result.meeting_link == "https://meet.google.com/abc-defg-hij"
    assert result.error is not None
    assert "SMTP is not configured" in result.error


def test__create_session_ics() -> None:
    ics = create_session_ics(
        "uid-1", "Tutoring session", "Tutor: Ana", START, utcfromtimestamp(1792591200 + 3600), "https://meet.x/1"
    )

    assert ics.startswith(b"BEGIN:VCALENDAR")
    assert b"METHOD:REQUEST" in ics
    assert b"UID:uid-1" in ics
    assert b"LOCATION:https://meet.x/1" in ics


async def test__cancel_meeting() -> None:
    calendar = FakeCalendar()

    assert await MeetingProvider(calendar).cancel_meeting("evt_1")
    assert calendar.deleted == ["evt_1"]


async def test__cancel_meeting__failure() -> None:
    assert not await MeetingProvider(FakeCalendar(error="could not delete calendar event evt_1: 500")).cancel_meeting(
        "evt_1"
    )


async def test__cancel_meeting__without_calendar() -> None:
    assert not await MeetingProvider(None).cancel_meeting("evt_1")
