"""Cached roster of online player names with remote query backoff."""

import logging
import threading
from enum import Enum
from typing import Callable, Iterable

from ..clock import Clock, current_millis
from ..config import PlayerSourceSettings
from ..exceptions import QueryError
from .protocol import RemoteServer, query_players

logger = logging.getLogger(__name__)

QueryFunction = Callable[[str, int, float], list[str]]


class QueryState(Enum):
    """Whether the remote query is usable."""

    UNKNOWN = "unknown"  # Not tried yet, or retry delay elapsed
    ENABLED = "enabled"  # Last query succeeded
    UNAVAILABLE = "unavailable"  # Last query failed; retry after a delay
    DISABLED = "disabled"  # Turned off in configuration


class PlayerListCache:
    """
    Roster of online player names for player pickers.

    Merges the names known to the host (players connected through it) with
    the names reported by the remote server's query port. Results are cached
    for cache_seconds. A failed query marks the remote unavailable until
    retry_seconds have passed, so an unreachable server is not asked on
    every render.

    Only one refresh runs at a time. Once a snapshot exists, callers that
    arrive during a refresh get the previous snapshot instead of waiting.
    """

    def __init__(
        self,
        online_names: Callable[[], Iterable[str]],
        remote_server: Callable[[], RemoteServer | None],
        query: QueryFunction = query_players,
        clock: Clock | None = None,
    ):
        self._online_names = online_names
        self._remote_server = remote_server
        self._query = query
        self._clock = clock or current_millis
        self._refresh_lock = threading.Lock()
        self.configure(PlayerSourceSettings())

    def configure(self, settings: PlayerSourceSettings) -> None:
        """Reset all cached state, then apply new settings."""
        with self._refresh_lock:
            self._names: list[str] = []
            self._cache_time = 0
            self._has_snapshot = False
            self._next_query_attempt = 0
            self._failure_logged = False

            self._settings = settings
            self._cache_millis = settings.cache_seconds * 1000
            self._query_disabled = not settings.query.enabled
            self._state = QueryState.DISABLED if self._query_disabled else QueryState.UNKNOWN

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def next_query_attempt(self) -> int:
        """Epoch millis before which the remote is not queried again."""
        return self._next_query_attempt

    def _is_fresh(self, now: int) -> bool:
        return self._has_snapshot and now - self._cache_time < self._cache_millis

    def names(self) -> list[str]:
        """Online player names, deduplicated and sorted case-insensitively."""
        if self._is_fresh(self._clock()):
            return list(self._names)

        if not self._refresh_lock.acquire(blocking=not self._has_snapshot):
            # Another caller is refreshing; serve the previous snapshot.
            return list(self._names)
        try:
            now = self._clock()
            if not self._is_fresh(now):
                self._names = self._refresh()
                self._cache_time = now
                self._has_snapshot = True
            return list(self._names)
        finally:
            self._refresh_lock.release()

    def _refresh(self) -> list[str]:
        names = dict.fromkeys(self._online_names())

        if self._should_attempt_query():
            try:
                names.update(dict.fromkeys(self._query_remote()))
            except QueryError as e:
                if not self._failure_logged:
                    logger.warning("Unable to query remote server for player list: %s", e)
                    self._failure_logged = True
                else:
                    logger.debug("Unable to query remote server for player list: %s", e)
                self._state = QueryState.UNAVAILABLE
                self._next_query_attempt = (
                    self._clock() + self._settings.query.retry_seconds * 1000
                )
            else:
                self._state = QueryState.ENABLED
                self._failure_logged = False
                self._next_query_attempt = 0

        return sorted(names, key=str.casefold)

    def _should_attempt_query(self) -> bool:
        if self._state == QueryState.DISABLED or self._query_disabled:
            return False
        if self._state == QueryState.UNAVAILABLE:
            if self._clock() < self._next_query_attempt:
                return False
            self._state = QueryState.UNKNOWN
        return True

    def _query_remote(self) -> list[str]:
        remote = self._remote_server()
        if remote is None:
            return []
        query = self._settings.query
        port = query.port if query.port > 0 else remote.port
        return self._query(remote.host, port, query.timeout_ms / 1000)
