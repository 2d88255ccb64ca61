import asyncio
from datetime import datetime, timedelta
from typing import Any
from urllib.parse import quote

from httpx import AsyncClient, HTTPError, Response

from ..exceptions.booking import NotificationDeliveryError
from ..logger import get_logger
from ..utils.utc import utcnow


logger = get_logger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"


def _json_object(response: Response, action: str) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError as e:
        raise NotificationDeliveryError(f"{action}: response is not valid json") from e

    if not isinstance(data, dict):
        raise NotificationDeliveryError(f"{action}: unexpected response")
    return data


def _meeting_link(data: dict[str, Any]) -> str | None:
    if isinstance(link := data.get("hangoutLink"), str) and link:
        return link

    conference = data.get("conferenceData")
    entry_points = conference.get("entryPoints") if isinstance(conference, dict) else None
    for entry_point in entry_points if isinstance(entry_points, list) else []:
        if isinstance(entry_point, dict) and isinstance(uri := entry_point.get("uri"), str) and uri:
            return uri
    return None


class GoogleCredentials:
    """
    OAuth access token of the platform's Google account.

    The token is fetched with the refresh token when it is missing or about to expire and kept on the instance.
    Create one instance per process and share it, concurrent callers wait for a single refresh.
    """

    def __init__(
        self, client_id: str, client_secret: str, refresh_token: str, leeway: timedelta = timedelta(minutes=5)
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token
        self._leeway = leeway
        self._lock = asyncio.Lock()
        self._access_token: str | None = None
        self._expires_at: datetime | None = None

    async def get_valid_token(self) -> str:
        async with self._lock:
            if self._access_token and self._expires_at and self._expires_at - self._leeway > utcnow():
                return self._access_token

            logger.info("refreshing google access token")
            try:
                async with AsyncClient() as client:
                    response = await client.post(
                        GOOGLE_TOKEN_URL,
                        data={
                            "client_id": self._client_id,
                            "client_secret": self._client_secret,
                            "refresh_token": self._refresh_token,
                            "grant_type": "refresh_token",
                        },
                    )
            except HTTPError as e:
                raise NotificationDeliveryError(f"google token refresh failed: {e}") from e

            if response.status_code != 200:
                raise NotificationDeliveryError(f"google token refresh failed: {response.status_code}")

            data = _json_object(response, "google token refresh failed")
            if not isinstance(token := data.get("access_token"), str) or not token:
                raise NotificationDeliveryError("google token refresh returned no access token")
            try:
                expires_in = int(data.get("expires_in", 3600))
            except (TypeError, ValueError) as e:
                raise NotificationDeliveryError("google token refresh returned an invalid expiry") from e

            self._access_token = token
            self._expires_at = utcnow() + timedelta(seconds=expires_in)
            return self._access_token


class GoogleCalendar:
    def __init__(self, credentials: GoogleCredentials, calendar_id: str, timezone: str) -> None:
        self.credentials = credentials
        self.calendar_id = calendar_id
        self.timezone = timezone

    async def create_event(
        self, summary: str, description: str, start: datetime, end: datetime, attendees: list[str]
    ) -> tuple[str, str | None]:
        """Create an event with a Google Meet conference and return its id and meeting link"""

        token = await self.credentials.get_valid_token()
        event: dict[str, Any] = {
            "summary": summary,
            "description": description,
            "start": {"dateTime": start.isoformat(), "timeZone": self.timezone},
            "end": {"dateTime": end.isoformat(), "timeZone": self.timezone},
            "attendees": [{"email": email, "responseStatus": "needsAction"} for email in attendees],
            "conferenceData": {
                "createRequest": {
                    "requestId": f"tutoring-{int(utcnow().timestamp() * 1000)}",
                    "conferenceSolutionKey": {"type": "hangoutsMeet"},
                }
            },
            "reminders": {
                "useDefault": False,
                "overrides": [{"method": "email", "minutes": 24 * 60}, {"method": "popup", "minutes": 30}],
            },
        }

        try:
            async with AsyncClient(
                base_url=GOOGLE_CALENDAR_API, headers={"Authorization": f"Bearer {token}"}
            ) as client:
                response = await client.post(
                    f"/calendars/{quote(self.calendar_id, safe='')}/events",
                    params={"conferenceDataVersion": 1, "sendUpdates": "none"},
                    json=event,
                )
        except HTTPError as e:
            raise NotificationDeliveryError(f"could not create calendar event: {e}") from e

        if response.status_code != 200:
            raise NotificationDeliveryError(f"could not create calendar event: {response.status_code}")

        data = _json_object(response, "could not create calendar event")
        if not isinstance(event_id := data.get("id"), str) or not event_id:
            raise NotificationDeliveryError("could not create calendar event: response has no event id")
        return event_id, _meeting_link(data)

    async def delete_event(self, event_id: str) -> None:
        """Delete an event and notify its attendees. Events that are already gone count as deleted."""

        token = await self.credentials.get_valid_token()
        try:
            async with AsyncClient(
                base_url=GOOGLE_CALENDAR_API, headers={"Authorization": f"Bearer {token}"}
            ) as client:
                response = await client.delete(
                    f"/calendars/{quote(self.calendar_id, safe='')}/events/{quote(event_id, safe='')}",
                    params={"sendUpdates": "all"},
                )
        except HTTPError as e:
            raise NotificationDeliveryError(f"could not delete calendar event {event_id}: {e}") from e

        if response.status_code in (404, 410):
            logger.info(f"calendar event {event_id} was already deleted")
            return
        if response.status_code not in (200, 204):
            raise NotificationDeliveryError(f"could not delete calendar event {event_id}: {response.status_code}")
