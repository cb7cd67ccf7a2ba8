"""FastAPI dependencies for the server context and DB sessions."""

from collections.abc import AsyncIterator

from fastapi import Request
from sqlalchemy.orm import Session

from echo_social.context import ServerContext


def get_context(request: Request) -> ServerContext:
    return request.app.state.context


async def get_db(request: Request) -> AsyncIterator[Session]:
    """Yield one session per request; the store is held until the request is done with it."""

    async with get_context(request).store_session() as db:
        yield db
