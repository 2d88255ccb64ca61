from typing import Any, AsyncIterator

import jwt
import pytest
from httpx import ASGITransport, AsyncClient

from tutoring.app import app
from tutoring.database import DB
from tutoring.dependencies import get_meeting_provider, get_payment_gateway
from tutoring.utils.utc import utcnow


def auth(user_id: str, admin: bool = False) -> dict[str, str]:
    token = jwt.encode(
        {"uid": user_id, "admin": admin, "exp": int(utcnow().timestamp()) + 3600}, "test-jwt-secret", "HS256"
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers() -> Any:
    return auth


@pytest.fixture
async def client(database: DB, gateway: Any, meetings: Any) -> AsyncIterator[AsyncClient]:
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_meeting_provider] = lambda: meetings

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
