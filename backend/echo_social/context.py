"""Process-wide server state, built once per application and passed explicitly."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, nullcontext
from dataclasses import dataclass, field

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from echo_social.config import Settings
from echo_social.db.base import Base
from echo_social.db.session import build_engine, build_session_factory
from echo_social.realtime.registry import ConnectionRegistry
from echo_social.services.hooks import PostCommitHooks
from echo_social.services.notifications import register_notification_hooks
from echo_social.services.sessions import SessionTokenStore


@dataclass(slots=True)
class ServerContext:
    """Everything request and connection handlers share."""

    settings: Settings
    engine: Engine
    session_factory: sessionmaker[Session]
    registry: ConnectionRegistry = field(default_factory=ConnectionRegistry)
    sessions: SessionTokenStore = field(default_factory=SessionTokenStore)
    hooks: PostCommitHooks = field(default_factory=lambda: register_notification_hooks(PostCommitHooks()))
    # Set when every session shares one DBAPI connection (in-memory SQLite).
    store_lock: asyncio.Lock | None = None

    def create_schema(self) -> None:
        """Create missing tables; used for the in-process store and tests."""

        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    @asynccontextmanager
    async def store_session(self) -> AsyncIterator[Session]:
        """Session for one unit of work, exclusive when the store is a single shared connection.

        Sync handlers run on worker threads; without the lock two of them
        would share one SQLite transaction and could roll back each other's
        flushed rows. Waiters queue on the event loop, not on worker threads.
        """

        async with self.store_lock or nullcontext():
            with self.session_factory() as db:
                yield db


def build_context(settings: Settings, *, engine: Engine | None = None) -> ServerContext:
    """Construct a fresh context with its own store, registry and hooks."""

    engine = engine or build_engine(settings.database_url, echo=settings.database_echo)
    return ServerContext(
        settings=settings,
        engine=engine,
        session_factory=build_session_factory(engine),
        sessions=SessionTokenStore(settings.session_token_bytes, settings.session_tokens_per_user),
        store_lock=asyncio.Lock() if isinstance(engine.pool, StaticPool) else None,
    )
