from dataclasses import dataclass
from enum import Enum
from types import MethodType
from typing import Any, Callable, List, Optional, Set

from alphagrid.grid.items import FolderPosition, GridItem, OrderingConfig
from alphagrid.grid.ordering import compare_items, reload_app_grid, reorder_folder_contents
from alphagrid.host.interfaces import ControlsState, ShellContext
from alphagrid.shared.injection import InjectionManager

REORDER_DELAY_MS = 100

LOGGING_ENABLED_KEY = "logging-enabled"
SORT_FOLDER_CONTENTS_KEY = "sort-folder-contents"
FOLDER_ORDER_POSITION_KEY = "folder-order-position"
PINNED_FOLDERS_KEY = "pinned-folders"


class SyncState(Enum):
    IDLE = "idle"
    REORDERING = "reordering"


@dataclass
class Subscription:
    source: Any
    signal: str
    handler_id: int

    def disconnect(self) -> None:
        """Disconnects the handler unless the source already dropped it."""
        is_connected = getattr(self.source, "handler_is_connected", None)
        if is_connected is not None and not is_connected(self.handler_id):
            return
        self.source.disconnect(self.handler_id)


class AppGridSync:
    """
    Keeps the host app grid in alphabetical order.

    Owns the overrides of the host grid's comparator and redisplay slots,
    listens to every source that can invalidate the current order, and runs
    at most one reorder at a time: a trigger sorts folder contents right away
    (when enabled) and schedules the grid redisplay REORDER_DELAY_MS later.
    Triggers that arrive in between are dropped, so a burst of changes
    collapses into a single redisplay.
    """

    def __init__(
        self,
        shell: ShellContext,
        extension_settings: Any,
        logger: Any,
        timers: Any = None,
    ):
        """
        Args:
            shell: Host objects to patch and listen to.
            extension_settings: The extension's own settings store.
            logger: A ToggleLogAdapter; its `enabled` flag follows `logging-enabled`.
            timers: Object exposing timeout_add(ms, callback) and cleanup(),
                which removes every source it still holds. Defaults to a
                GLib TimeoutHelper owned by this controller.
        """
        if timers is None:
            from alphagrid.shared.timers import TimeoutHelper

            timers = TimeoutHelper(logger)
        self.shell = shell
        self.settings = extension_settings
        self.logger = logger
        self.timers = timers
        self._injection_manager = InjectionManager(logger)
        self._subscriptions: List[Subscription] = []
        self._state = SyncState.IDLE
        self._reorder_timeout_id: Optional[int] = None
        self._reported_positions: Set[str] = set()

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state is SyncState.REORDERING

    @property
    def pending_timeout(self) -> Optional[int]:
        return self._reorder_timeout_id

    @property
    def subscriptions(self) -> List[Subscription]:
        return list(self._subscriptions)

    def ordering_config(self) -> OrderingConfig:
        """Reads the current ordering policy from the extension settings."""
        raw_position = self.settings.get_string(FOLDER_ORDER_POSITION_KEY)
        if not FolderPosition.is_known(raw_position):
            if raw_position not in self._reported_positions:
                self._reported_positions.add(raw_position)
                self.logger.warning(
                    f"Unknown folder-order-position {raw_position!r}, ordering folders alphabetically"
                )
        return OrderingConfig(
            folder_position=FolderPosition.parse(raw_position),
            pinned_folder_ids=tuple(self.settings.get_strv(PINNED_FOLDERS_KEY)),
        )

    def patch_shell(self) -> None:
        """Installs the alphabetical comparator and the redisplay trampoline."""
        grid = self.shell.grid

        def _patched_compare_items(a: GridItem, b: GridItem) -> int:
            config = self.ordering_config()
            return compare_items(a, b, config.folder_position, config.pinned_folder_ids)

        self._injection_manager.override_method(
            grid, "_compare_items", lambda _original: _patched_compare_items
        )
        self.logger.debug("Patched item comparison")
        self._injection_manager.override_method(
            grid, "_redisplay", lambda _original: MethodType(reload_app_grid, grid)
        )
        self.logger.debug("Patched redisplay")

    def unpatch_shell(self) -> None:
        self._injection_manager.clear()
        self.logger.debug("Unpatched item comparison and redisplay")

    @property
    def patched(self) -> bool:
        return self._injection_manager.is_overridden(self.shell.grid, "_redisplay")

    def reorder_grid(self, reason: str) -> bool:
        """
        Starts a reorder unless one is in flight or the host is mid-update.
        Returns True when the request was accepted.
        """
        if self._state is SyncState.REORDERING:
            self.logger.debug(f"Reorder already in flight, dropped: {reason}")
            return False
        if getattr(self.shell.grid, "_updating_pages", False):
            self.logger.debug(f"Host grid is updating pages, dropped: {reason}")
            return False
        self._state = SyncState.REORDERING
        self.logger.info(reason)
        if self.settings.get_boolean(SORT_FOLDER_CONTENTS_KEY):
            self.logger.info("Reordering folder contents")
            try:
                reorder_folder_contents(
                    self.shell.folder_settings,
                    self.shell.open_folder,
                    self.shell.app_system.lookup_app,
                    self.logger,
                )
            except Exception as e:
                self.logger.error(f"Failed to reorder folder contents: {e}", exc_info=True)
        self._reorder_timeout_id = self.timers.timeout_add(
            REORDER_DELAY_MS, self._on_reorder_timeout
        )
        return True

    def _on_reorder_timeout(self) -> bool:
        try:
            self.shell.grid._redisplay()
        finally:
            self._state = SyncState.IDLE
            self._reorder_timeout_id = None
        return False

    def _subscribe(self, source: Any, signal: str, handler: Callable) -> None:
        handler_id = source.connect(signal, handler)
        self._subscriptions.append(Subscription(source, signal, handler_id))

    def start_listeners(self) -> None:
        shell = self.shell
        self._subscribe(
            shell.shell_settings, "changed::app-picker-layout", self._on_layout_changed
        )
        self._subscribe(shell.overview, "item-drag-end", self._on_item_drag_end)
        self._subscribe(
            shell.shell_settings, "changed::favorite-apps", self._on_favorites_changed
        )
        self._subscribe(self.settings, "changed", self._on_extension_settings_changed)
        self._subscribe(
            shell.folder_settings, "changed::folder-children", self._on_folders_changed
        )
        self._subscribe(
            shell.app_system, "installed-changed", self._on_installed_apps_changed
        )
        # wired once, fires on every transition into the app grid
        self._subscribe(
            shell.state_adjustment, "notify::value", self._on_view_state_changed
        )
        self.logger.debug("Connected to listeners")

    def disconnect_listeners(self) -> None:
        """Detaches every handler and removes the pending redisplay, if any."""
        while self._subscriptions:
            self._subscriptions.pop().disconnect()
        self.timers.cleanup()
        self._reorder_timeout_id = None
        self._state = SyncState.IDLE
        self.logger.debug("Disconnected from listeners")

    def _on_layout_changed(self, *_):
        self.reorder_grid("App grid layout changed, triggering reorder")

    def _on_item_drag_end(self, *_):
        self.reorder_grid("App movement detected, triggering reorder")

    def _on_favorites_changed(self, *_):
        self.reorder_grid("Favourite apps changed, triggering reorder")

    def _on_extension_settings_changed(self, settings, *_):
        self.logger.enabled = settings.get_boolean(LOGGING_ENABLED_KEY)
        self.reorder_grid("Extension settings changed, triggering reorder")

    def _on_folders_changed(self, *_):
        self.reorder_grid("Folders changed, triggering reorder")

    def _on_installed_apps_changed(self, *_):
        self.reorder_grid("Installed apps changed, triggering reorder")

    def _on_view_state_changed(self, adjustment, *_):
        if adjustment.get_value() == ControlsState.APP_GRID:
            self.reorder_grid("App grid opened, triggering reorder")
