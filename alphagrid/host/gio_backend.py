import gi
from typing import List, Optional

gi.require_version("Gio", "2.0")
from gi.repository import Gio, GObject  # pyright: ignore

SHELL_SCHEMA = "org.gnome.shell"
FOLDERS_SCHEMA = "org.gnome.desktop.app-folders"
FOLDER_SCHEMA = "org.gnome.desktop.app-folders.folder"
FOLDER_PATH = "/org/gnome/desktop/app-folders/folders/{}/"


class MissingSchemaError(LookupError):
    pass


def schema_installed(schema_id: str) -> bool:
    source = Gio.SettingsSchemaSource.get_default()
    return source is not None and source.lookup(schema_id, True) is not None


def _open_settings(schema_id: str) -> Gio.Settings:
    # Gio.Settings aborts the process on an unknown schema, so look it up first.
    if not schema_installed(schema_id):
        raise MissingSchemaError(f"GSettings schema '{schema_id}' is not installed")
    return Gio.Settings.new(schema_id)


def open_shell_settings() -> Gio.Settings:
    return _open_settings(SHELL_SCHEMA)


def open_folder_settings() -> Gio.Settings:
    return _open_settings(FOLDERS_SCHEMA)


def open_folder(folder_id: str) -> Optional[Gio.Settings]:
    """Returns the relocatable settings of one app folder, or None."""
    if not folder_id or not schema_installed(FOLDER_SCHEMA):
        return None
    return Gio.Settings.new_with_path(FOLDER_SCHEMA, FOLDER_PATH.format(folder_id))


class AppSystem(GObject.Object):
    """
    The installed-app inventory. Relays Gio.AppInfoMonitor changes as
    `installed-changed` and resolves desktop ids to app infos.
    """

    __gsignals__ = {
        "installed-changed": (GObject.SignalFlags.RUN_FIRST, None, ()),
    }

    def __init__(self):
        super().__init__()
        self._installed: Optional[List[Gio.AppInfo]] = None
        self._monitor = Gio.AppInfoMonitor.get()
        self._monitor_handler = self._monitor.connect("changed", self._on_monitor_changed)

    def _on_monitor_changed(self, _monitor) -> None:
        self._installed = None
        self.emit("installed-changed")

    def get_installed(self) -> List[Gio.AppInfo]:
        if self._installed is None:
            self._installed = [app for app in Gio.AppInfo.get_all() if app.should_show()]
        return self._installed

    def lookup_app(self, app_id: str) -> Optional[Gio.DesktopAppInfo]:
        try:
            return Gio.DesktopAppInfo.new(app_id)
        except TypeError:
            return None

    def close(self) -> None:
        if self._monitor_handler is not None:
            self._monitor.disconnect(self._monitor_handler)
            self._monitor_handler = None
