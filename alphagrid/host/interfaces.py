from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, List, Optional, Protocol, Sequence

from alphagrid.grid.items import GridItem


class ControlsState(IntEnum):
    """Values taken by the host's view-state adjustment."""

    HIDDEN = 0
    WINDOW_PICKER = 1
    APP_GRID = 2


class SignalEmitter(Protocol):
    def connect(self, detailed_signal: str, callback: Callable, *user_data: Any) -> int: ...

    def disconnect(self, handler_id: int) -> None: ...


class SettingsStore(SignalEmitter, Protocol):
    """The subset of Gio.Settings the extension relies on."""

    def get_boolean(self, key: str) -> bool: ...

    def get_string(self, key: str) -> str: ...

    def get_strv(self, key: str) -> List[str]: ...

    def set_strv(self, key: str, value: Sequence[str]) -> bool: ...

    def is_writable(self, key: str) -> bool: ...


class AppInfo(Protocol):
    def get_name(self) -> Optional[str]: ...


class AppInventory(SignalEmitter, Protocol):
    """Emits `installed-changed` whenever the set of installed apps changes."""

    def lookup_app(self, app_id: str) -> Optional[AppInfo]: ...


class StateAdjustment(SignalEmitter, Protocol):
    def get_value(self) -> float: ...


class GridDisplay(Protocol):
    """
    The host's grid-display component. `_redisplay` and `_compare_items` are
    the two slots the extension overrides; `_updating_pages` is true while
    the host is rebuilding pages on its own.
    """

    _updating_pages: bool

    def _redisplay(self) -> None: ...

    def _compare_items(self, a: GridItem, b: GridItem) -> int: ...

    def _load_apps(self) -> List[GridItem]: ...

    def _set_ordered_items(self, items: List[GridItem]) -> None: ...


@dataclass
class ShellContext:
    """Everything the extension reads from, listens to or patches in the host."""

    grid: GridDisplay
    overview: SignalEmitter
    state_adjustment: StateAdjustment
    app_system: AppInventory
    shell_settings: SettingsStore
    folder_settings: SettingsStore
    open_folder: Callable[[str], Optional[SettingsStore]]
