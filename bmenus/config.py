"""Configuration snapshot loaded from menus.yml."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from mashumaro import DataClassDictMixin, field_options
from mashumaro.exceptions import InvalidFieldValue, MissingField

from .menus.definitions import MAIN_MENU_ID, MenuDefinition

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SECONDS = 3
DEFAULT_QUERY_TIMEOUT_MS = 1500
DEFAULT_RETRY_SECONDS = 30
DEFAULT_FLUSH_INTERVAL_SECONDS = 300
DEFAULT_MAX_COMMANDS = 50
DEFAULT_EXPIRY_SECONDS = 7 * 24 * 60 * 60


def _as_int(value: Any, default: int) -> int:
    """Coerce a YAML number to int, falling back to default for anything else."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return int(value)


@dataclass
class QuerySettings(DataClassDictMixin):
    """players.query section."""

    enabled: bool = True
    port: int = -1  # -1 = use the remote server's own port
    timeout_ms: int = field(
        default=DEFAULT_QUERY_TIMEOUT_MS, metadata=field_options(alias="timeout-ms")
    )
    retry_seconds: int = field(
        default=DEFAULT_RETRY_SECONDS, metadata=field_options(alias="retry-seconds")
    )

    def __post_init__(self) -> None:
        if not isinstance(self.enabled, bool):
            self.enabled = True
        port = _as_int(self.port, -1)
        self.port = port if port > 0 else -1
        timeout = _as_int(self.timeout_ms, DEFAULT_QUERY_TIMEOUT_MS)
        self.timeout_ms = timeout if timeout > 0 else DEFAULT_QUERY_TIMEOUT_MS
        self.retry_seconds = max(0, _as_int(self.retry_seconds, DEFAULT_RETRY_SECONDS))


@dataclass
class PlayerSourceSettings(DataClassDictMixin):
    """players section: roster cache and remote query."""

    cache_seconds: int = field(
        default=DEFAULT_CACHE_SECONDS, metadata=field_options(alias="cache-seconds")
    )
    query: QuerySettings = field(default_factory=QuerySettings)

    def __post_init__(self) -> None:
        self.cache_seconds = max(0, _as_int(self.cache_seconds, DEFAULT_CACHE_SECONDS))


@dataclass
class UsageSettings(DataClassDictMixin):
    """usage section: flush schedule and table limits."""

    flush_interval_seconds: int = field(
        default=DEFAULT_FLUSH_INTERVAL_SECONDS,
        metadata=field_options(alias="flush-interval-seconds"),
    )
    max_commands: int = field(
        default=DEFAULT_MAX_COMMANDS, metadata=field_options(alias="max-commands")
    )
    expiry_seconds: int = field(
        default=DEFAULT_EXPIRY_SECONDS, metadata=field_options(alias="expiry-seconds")
    )

    def __post_init__(self) -> None:
        self.flush_interval_seconds = max(
            1, _as_int(self.flush_interval_seconds, DEFAULT_FLUSH_INTERVAL_SECONDS)
        )
        self.max_commands = max(0, _as_int(self.max_commands, DEFAULT_MAX_COMMANDS))
        self.expiry_seconds = _as_int(self.expiry_seconds, DEFAULT_EXPIRY_SECONDS)

    @property
    def expiry_millis(self) -> int:
        return self.expiry_seconds * 1000


_SECTION_ERRORS = (MissingField, InvalidFieldValue, TypeError, ValueError)


def _load_section(section_cls: type, data: Any, name: str):
    """Deserialize one config section, using defaults if it is absent or broken."""
    if not isinstance(data, dict):
        if data is not None:
            logger.warning("Ignoring malformed '%s' section in menus.yml", name)
        return section_cls()
    try:
        return section_cls.from_dict(data)
    except _SECTION_ERRORS as e:
        logger.warning("Ignoring malformed '%s' section in menus.yml: %s", name, e)
        return section_cls()


@dataclass(frozen=True)
class MenuConfig:
    """
    Immutable configuration snapshot.

    A reload builds a new snapshot and swaps it in whole, so readers never
    see a half-applied configuration.
    """

    menus: dict[str, MenuDefinition] = field(default_factory=dict)
    default_commands: tuple[str, ...] = ()
    usage: UsageSettings = field(default_factory=UsageSettings)
    players: PlayerSourceSettings = field(default_factory=PlayerSourceSettings)

    @classmethod
    def from_dict(cls, root: dict[str, Any] | None) -> "MenuConfig":
        """Build a snapshot from the parsed YAML document."""
        if not root:
            return cls()

        menus: dict[str, MenuDefinition] = {}
        raw_menus = root.get("menus")
        if isinstance(raw_menus, dict):
            for menu_id, raw_menu in raw_menus.items():
                if not isinstance(raw_menu, dict):
                    logger.warning("Skipping menu %s: not a mapping", menu_id)
                    continue
                try:
                    menus[str(menu_id)] = MenuDefinition.from_dict(raw_menu)
                except _SECTION_ERRORS as e:
                    logger.warning("Skipping menu %s: %s", menu_id, e)

        main_menu = menus.get(MAIN_MENU_ID)
        if main_menu is not None:
            main_menu.move_common_first()

        default_commands: tuple[str, ...] = ()
        defaults = root.get("defaults")
        if isinstance(defaults, dict):
            common = defaults.get("common")
            if isinstance(common, list):
                default_commands = tuple(str(command) for command in common)

        return cls(
            menus=menus,
            default_commands=default_commands,
            usage=_load_section(UsageSettings, root.get("usage"), "usage"),
            players=_load_section(PlayerSourceSettings, root.get("players"), "players"),
        )

    @classmethod
    def load(cls, path: Path) -> "MenuConfig":
        """
        Read and parse a menus.yml file.

        Raises:
            OSError: If the file cannot be read.
            yaml.YAMLError: If the file is not valid YAML.
        """
        with open(path, encoding="utf-8") as f:
            root = yaml.safe_load(f)
        if root is not None and not isinstance(root, dict):
            raise yaml.YAMLError(f"{path} does not contain a mapping")
        return cls.from_dict(root)
