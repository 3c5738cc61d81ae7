"""YAML file persistence for command usage tables."""

import logging
import threading
from pathlib import Path
from typing import Any

import yaml
from mashumaro.exceptions import InvalidFieldValue

from ..usage.store import UsageEntry, UsageTable

logger = logging.getLogger(__name__)


def _parse_entry(value: Any) -> UsageEntry | None:
    """Parse a stored entry: {count, last} or a legacy bare count."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        # Legacy format: count only, never used as far as expiry is concerned
        return UsageEntry(count=value, last=0)
    if isinstance(value, dict):
        count = value.get("count")
        last = value.get("last")
        try:
            return UsageEntry.from_dict(
                {
                    "count": 0 if count is None else int(count),
                    "last": 0 if last is None else int(last),
                }
            )
        except (TypeError, ValueError, InvalidFieldValue):
            return None
    return None


class UsageFile:
    """
    Reads and writes usage.yml.

    Layout: player id -> command -> {count: int, last: epoch millis}.
    """

    def __init__(self, path: str | Path = "usage.yml"):
        self.path = Path(path)
        self._write_lock = threading.Lock()

    def load(self) -> dict[str, UsageTable]:
        """
        Read all usage tables. A missing file means no usage yet.

        Raises:
            OSError: If the file exists but cannot be read.
            yaml.YAMLError: If the file is not valid YAML.
        """
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            root = yaml.safe_load(f)
        if not root:
            return {}
        if not isinstance(root, dict):
            raise yaml.YAMLError(f"{self.path} does not contain a mapping")

        tables: dict[str, UsageTable] = {}
        for player, commands in root.items():
            if not isinstance(commands, dict):
                logger.warning("Skipping usage for %s: not a mapping", player)
                continue
            table: UsageTable = {}
            for command, value in commands.items():
                entry = _parse_entry(value)
                if entry is None:
                    logger.warning(
                        "Skipping malformed usage entry %r for %s", command, player
                    )
                    continue
                table[str(command)] = entry
            tables[str(player)] = table
        return tables

    def save(self, tables: dict[str, UsageTable]) -> None:
        """
        Write all usage tables, replacing the file.

        Raises:
            OSError: If the file cannot be written.
        """
        root = {
            player: {command: entry.to_dict() for command, entry in table.items()}
            for player, table in tables.items()
        }
        with self._write_lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.safe_dump(root, f, sort_keys=False, allow_unicode=True)
