"""Menu manager that ties configuration, forms, templates and usage together."""

import logging
import shutil
import threading
from pathlib import Path
from typing import Any, Callable, Iterable

import yaml

from ..clock import Clock
from ..commands.template import CommandForm, CommandTemplate, label_for
from ..config import MenuConfig
from ..exceptions import TemplateError
from ..menus.definitions import COMMON_MENU_ID, MenuButton, MenuDefinition, MenuKind
from ..persistence.usage_file import UsageFile
from ..query.player_list import PlayerListCache, QueryFunction
from ..query.protocol import RemoteServer, query_players
from ..usage.store import UsageStore
from ..users.base import Session
from ..users.forms import SimpleForm
from .flush_scheduler import FlushScheduler

logger = logging.getLogger(__name__)

COMMON_MENU_LIMIT = 10
CONFIG_FILE = "menus.yml"
USAGE_FILE = "usage.yml"

# Default paths based on module location
_MODULE_DIR = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = _MODULE_DIR / "resources" / CONFIG_FILE


class MenuManager:
    """
    Loads menus from the data directory and shows them to players.

    Coordinates the configuration snapshot, the player list cache, command
    templates and per-player usage tracking. Form callbacks may arrive on any
    thread.
    """

    def __init__(
        self,
        data_dir: str | Path,
        online_names: Callable[[], Iterable[str]] = tuple,
        remote_server: Callable[[], RemoteServer | None] = lambda: None,
        query: QueryFunction = query_players,
        clock: Clock | None = None,
    ):
        self.data_dir = Path(data_dir)
        self.config_path = self.data_dir / CONFIG_FILE

        self._config = MenuConfig()
        self._players = PlayerListCache(online_names, remote_server, query, clock)
        self._usage = UsageStore(clock)
        self._usage_file = UsageFile(self.data_dir / USAGE_FILE)
        self._usage_loaded = False
        self._save_lock = threading.Lock()
        self._scheduler = FlushScheduler(self.save_usage)

    @property
    def config(self) -> MenuConfig:
        return self._config

    @property
    def players(self) -> PlayerListCache:
        return self._players

    @property
    def usage(self) -> UsageStore:
        return self._usage

    @property
    def scheduler(self) -> FlushScheduler:
        return self._scheduler

    # Lifecycle

    def load_configuration(self) -> None:
        """
        Load menus.yml and rebuild all derived state.

        Writes the bundled default file first if none exists. On a read
        error the previous configuration stays in effect. Usage data is read
        from disk only on the first call.
        """
        if not self.config_path.exists():
            self._save_default_config()

        try:
            config = MenuConfig.load(self.config_path)
        except (OSError, yaml.YAMLError) as e:
            logger.error("Unable to load %s: %s", self.config_path, e)
            config = self._config
        else:
            logger.info("Loaded %d menus from %s", len(config.menus), self.config_path)

        self._config = config
        self._players.configure(config.players)
        self._usage.configure(config.default_commands, config.usage)

        if not self._usage_loaded:
            self._load_usage()
            self._usage_loaded = True

        self._scheduler.start(config.usage.flush_interval_seconds)

    def _save_default_config(self) -> None:
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(DEFAULT_CONFIG_PATH, self.config_path)
        except OSError as e:
            logger.error("Unable to save default %s: %s", CONFIG_FILE, e)

    def _load_usage(self) -> None:
        try:
            tables = self._usage_file.load()
        except (OSError, yaml.YAMLError) as e:
            logger.error("Unable to load usage data: %s", e)
            return
        self._usage.load(tables)

    def save_usage(self) -> None:
        """Write usage data to disk. Failures are logged and retried next flush."""
        # Snapshot and write together so an older snapshot never lands last
        with self._save_lock:
            try:
                self._usage_file.save(self._usage.snapshot())
            except OSError as e:
                logger.error("Unable to save usage data: %s", e)

    def shutdown(self) -> None:
        """Stop the flush schedule, then write usage data one last time."""
        self._scheduler.stop()
        self.save_usage()

    # Menus

    def open_menu(self, session: Session, menu_id: str) -> None:
        """Show the menu with the given id to a player."""
        menu = self._config.menus.get(menu_id)
        if menu is None:
            logger.warning("Menu %s not found", menu_id)
            return
        if menu_id.lower() == COMMON_MENU_ID:
            self._open_common(session, menu)
            return

        kind = menu.menu_kind
        if kind == MenuKind.SIMPLE:
            self._open_simple(session, menu)
        elif kind == MenuKind.CUSTOM:
            self._open_custom(session, menu)
        else:
            logger.warning("Menu %s has unknown type %r", menu_id, menu.kind)

    def _open_simple(self, session: Session, menu: MenuDefinition) -> None:
        buttons = list(menu.buttons)
        form = SimpleForm(
            title=menu.title,
            buttons=[button.text for button in buttons],
            content=menu.content,
        )

        def on_response(index: int) -> None:
            if 0 <= index < len(buttons):
                self._handle_button(session, buttons[index])

        session.send_simple_form(form, on_response)

    def _open_common(self, session: Session, menu: MenuDefinition) -> None:
        """Show the player's most used commands."""
        self._usage.cleanup(session.uuid)
        commands = self._usage.ranked_top(session.uuid, COMMON_MENU_LIMIT)
        form = SimpleForm(
            title=menu.title,
            buttons=[label_for(command) for command in commands],
        )

        def on_response(index: int) -> None:
            if 0 <= index < len(commands):
                command = commands[index]
                self.run_command(session, label_for(command), command)

        session.send_simple_form(form, on_response)

    def _handle_button(self, session: Session, button: MenuButton) -> None:
        if button.menu is not None:
            self.open_menu(session, button.menu)
        elif button.command is not None:
            self.run_command(session, button.text, button.command)

    def _open_custom(self, session: Session, menu: MenuDefinition) -> None:
        if menu.command is not None:
            self.run_command(session, menu.title, menu.command)

    # Commands

    def run_command(self, session: Session, title: str, command: str) -> None:
        """
        Run a command template for a player.

        A template without arguments runs at once; otherwise the player is
        asked for the values first.
        """
        try:
            template = CommandTemplate.parse(command)
        except TemplateError as e:
            logger.warning("Invalid command template %r: %s", command, e)
            return

        if not template.arguments:
            self._record_and_execute(session, template.raw)
            return

        command_form = template.render(title, self._players.names)
        session.send_custom_form(
            command_form.form,
            lambda response: self._handle_command_form(session, command_form, response),
        )

    def _handle_command_form(
        self, session: Session, command_form: CommandForm, response: list[Any]
    ) -> None:
        try:
            values = command_form.values_from_response(response)
        except TemplateError as e:
            logger.debug("Ignoring form response from %s: %s", session.username, e)
            return
        self._record_and_execute(session, command_form.template.substitute(values))

    def _record_and_execute(self, session: Session, command: str) -> None:
        self._usage.record(session.uuid, command)
        session.send_command(command.removeprefix("/"))
