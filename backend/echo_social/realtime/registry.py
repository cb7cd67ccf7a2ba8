"""Registry of live realtime connections keyed by user id."""

from __future__ import annotations

from typing import Any, Protocol


class Connection(Protocol):
    """What the delivery code needs from a live socket."""

    async def send_json(self, data: Any, mode: str = "text") -> None: ...


class ConnectionRegistry:
    """One live connection per user; the most recent registration wins.

    Not thread-safe. It is only touched from the event loop that owns the
    sockets.
    """

    def __init__(self) -> None:
        self._connections: dict[int, Connection] = {}

    def register(self, user_id: int, connection: Connection) -> Connection | None:
        """Bind ``connection`` to ``user_id`` and return any binding it replaced."""

        previous = self._connections.get(user_id)
        self._connections[user_id] = connection
        return previous if previous is not connection else None

    def lookup(self, user_id: int) -> Connection | None:
        return self._connections.get(user_id)

    def remove(self, user_id: int, connection: Connection | None = None) -> bool:
        """Drop the binding for ``user_id``.

        When ``connection`` is given the binding is only dropped if it still
        points at that connection, so a superseded socket closing late cannot
        unbind its replacement. Removing an absent binding is a no-op.
        """

        current = self._connections.get(user_id)
        if current is None:
            return False
        if connection is not None and current is not connection:
            return False
        del self._connections[user_id]
        return True

    def connected_user_ids(self) -> list[int]:
        return list(self._connections)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)
