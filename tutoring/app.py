from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from . import __version__
from .database import db, db_context
from .endpoints import ROUTER, TAGS
from .logger import get_logger, setup_sentry
from .redis import redis
from .settings import settings


logger = get_logger(__name__)

if settings.sentry_dsn:
    logger.debug("initializing sentry")
    setup_sentry(settings.sentry_dsn, "tutoring", __version__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    logger.info(f"starting tutoring service v{__version__}")
    yield
    logger.info("shutting down")
    await redis.aclose()
    await db.engine.dispose()


app = FastAPI(
    title="Tutoring",
    description="Booking, payment and scheduling of tutoring sessions",
    version=__version__,
    root_path=settings.root_path,
    root_path_in_servers=False,
    openapi_tags=TAGS,
    lifespan=lifespan,
)
app.include_router(ROUTER)

if settings.debug:
    app.add_middleware(
        CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"], allow_credentials=True
    )


class DBSessionMiddleware:
    """Run every request in its own database session, committed before the response is sent."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_after_commit(message: Message) -> None:
            if message["type"] == "http.response.start":
                await db.commit()
            await send(message)

        async with db_context():
            await self.app(scope, receive, send_after_commit)


app.add_middleware(DBSessionMiddleware)


@app.exception_handler(StarletteHTTPException)
async def rollback_on_exception(request: Request, exc: HTTPException) -> Response:
    await db.rollback()
    return await http_exception_handler(request, exc)


@app.head("/status", include_in_schema=False)
async def status() -> None:
    pass
