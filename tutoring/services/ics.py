from datetime import datetime
from email.mime.base import MIMEBase
from email.encoders import encode_base64
from typing import cast

import icalendar


def create_session_ics(
    uid: str, summary: str, description: str, start: datetime, end: datetime, link: str | None
) -> bytes:
    cal = icalendar.Calendar()
    cal.add("prodid", "-//Tutoring//Sessions//EN")
    cal.add("version", "2.0")
    cal.add("method", "REQUEST")

    event = icalendar.Event()
    event.add("uid", uid)
    event.add("summary", summary)
    event.add("description", description)
    event.add("dtstart", start)
    event.add("dtend", end)
    if link:
        event.add("location", link)
    cal.add_component(event)

    return cast(bytes, cal.to_ical())


def ics_attachment(data: bytes, filename: str = "session.ics") -> MIMEBase:
    part = MIMEBase("text", "calendar", method="REQUEST", name=filename)
    part.set_payload(data)
    encode_base64(part)
    part.add_header("Content-Disposition", "attachment", filename=filename)
    return part
