"""Per-player command usage tracking for the frequently used commands menu."""

import logging
import threading
from dataclasses import dataclass

from mashumaro import DataClassDictMixin

from ..clock import Clock, current_millis
from ..config import UsageSettings

logger = logging.getLogger(__name__)


@dataclass
class UsageEntry(DataClassDictMixin):
    """How often a command was used and when (epoch millis) it was last used."""

    count: int = 0
    last: int = 0


UsageTable = dict[str, UsageEntry]


class UsageStore:
    """
    Ordered, bounded, time-decayed command counts per player.

    Each player's table is created on first use and seeded with the default
    commands at count 0. Entries keep insertion order, which breaks ties when
    ranking and when evicting.

    Zero-count defaults never expire. Other entries expire once unused for
    longer than the expiry window. A table over max_commands loses its
    lowest-count entries first.

    All operations hold a single lock, so concurrent form submissions see a
    consistent table for the whole record + cleanup step.
    """

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or current_millis
        self._lock = threading.RLock()
        self._tables: dict[str, UsageTable] = {}
        self._default_commands: tuple[str, ...] = ()
        self._max_commands = UsageSettings().max_commands
        self._expiry_millis = UsageSettings().expiry_millis

    def configure(
        self, default_commands: tuple[str, ...] | list[str], settings: UsageSettings
    ) -> None:
        """Apply new defaults and limits. Existing tables are kept."""
        with self._lock:
            self._default_commands = tuple(default_commands)
            self._max_commands = settings.max_commands
            self._expiry_millis = settings.expiry_millis

    @property
    def default_commands(self) -> tuple[str, ...]:
        return self._default_commands

    def _table(self, player: str) -> UsageTable:
        """Get a player's table, creating it seeded with defaults."""
        table = self._tables.get(player)
        if table is None:
            table = {command: UsageEntry() for command in self._default_commands}
            self._tables[player] = table
        return table

    def _is_idle_default(self, command: str, entry: UsageEntry) -> bool:
        return entry.count == 0 and command in self._default_commands

    def record(self, player: str, command: str) -> UsageEntry:
        """
        Count one use of a command.

        The first real use of a non-default command evicts the first default
        that is still unused, so untried defaults make room for real usage.
        """
        with self._lock:
            table = self._table(player)
            entry = table.get(command)
            previous = entry.count if entry else 0
            if entry is None:
                entry = table[command] = UsageEntry()
            entry.count += 1
            entry.last = self._clock()

            if previous == 0 and command not in self._default_commands:
                for default in self._default_commands:
                    default_entry = table.get(default)
                    if default_entry is not None and default_entry.count == 0:
                        del table[default]
                        break

            self._cleanup(table)
            return entry

    def cleanup(self, player: str) -> None:
        """Drop expired entries, then trim the table to max_commands."""
        with self._lock:
            self._cleanup(self._table(player))

    def _cleanup(self, table: UsageTable) -> None:
        now = self._clock()
        for command, entry in list(table.items()):
            if self._is_idle_default(command, entry):
                continue
            if now - entry.last > self._expiry_millis:
                del table[command]

        excess = len(table) - self._max_commands
        if excess > 0:
            # sorted() is stable, so equal counts go in table order
            by_count = sorted(table.items(), key=lambda item: item[1].count)
            for command, _ in by_count[:excess]:
                del table[command]

    def ranked_top(self, player: str, limit: int) -> list[str]:
        """Up to limit commands, most used first; ties keep table order."""
        with self._lock:
            table = self._table(player)
            ranked = sorted(table.items(), key=lambda item: item[1].count, reverse=True)
            return [command for command, _ in ranked[:limit]]

    def counts(self, player: str) -> dict[str, int]:
        """A copy of a player's table as command -> count, in table order."""
        with self._lock:
            return {command: entry.count for command, entry in self._table(player).items()}

    def get(self, player: str, command: str) -> UsageEntry | None:
        """A copy of one entry, or None if the player has no such command."""
        with self._lock:
            table = self._tables.get(player, {})
            entry = table.get(command)
            return UsageEntry(entry.count, entry.last) if entry else None

    def snapshot(self) -> dict[str, UsageTable]:
        """Deep copy of every table, for persistence."""
        with self._lock:
            return {
                player: {
                    command: UsageEntry(entry.count, entry.last)
                    for command, entry in table.items()
                }
                for player, table in self._tables.items()
            }

    def load(self, tables: dict[str, UsageTable]) -> None:
        """Replace all tables, e.g. with data read at startup."""
        with self._lock:
            self._tables = {player: dict(table) for player, table in tables.items()}
        logger.info("Loaded command usage for %d players", len(tables))
