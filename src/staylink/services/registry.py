"""Process-wide registry of live real-time connections."""

from __future__ import annotations

from threading import Lock
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Connection(Protocol):
    """Duplex connection handle the relay can push frames to."""

    @property
    def is_open(self) -> bool: ...

    async def send_json(self, data: dict[str, Any]) -> None: ...


class ConnectionRegistry:
    """Maps each user to at most one live connection.

    Registering a user again replaces the previous handle without closing it;
    the transport closes orphaned connections on its own. Removal is by handle
    so connections that never authenticated can be cleaned up too.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._entries: dict[str, Connection] = {}

    def register(self, user_id: int | str, connection: Connection) -> None:
        with self._lock:
            self._entries[str(user_id)] = connection

    def lookup(self, user_id: int | str) -> Connection | None:
        with self._lock:
            return self._entries.get(str(user_id))

    def unregister_by_handle(self, connection: Connection) -> int:
        """Remove every entry bound to ``connection`` and return how many."""
        with self._lock:
            stale = [key for key, value in self._entries.items() if value is connection]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return str(user_id) in self._entries


_REGISTRY = ConnectionRegistry()


def get_connection_registry() -> ConnectionRegistry:
    """Return the registry shared by every connection in this process."""
    return _REGISTRY
