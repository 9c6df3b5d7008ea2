import sys
import gi
from typing import List, Optional

gi.require_version("Gtk", "4.0")
from gi.repository import Gio, Gtk  # pyright: ignore

from alphagrid.core.extension import AppGridExtension
from alphagrid.core.log_setup import setup_logging
from alphagrid.host import gio_backend
from alphagrid.host.interfaces import ShellContext
from alphagrid.host.launcher import AppGridView, LauncherWindow, Overview
from alphagrid.shared.config_handler import ExtensionSettings
from alphagrid.shared.path_handler import PathHandler

APPLICATION_ID = "org.alphagrid.Launcher"


class AlphaGridApplication(Gtk.Application):
    """Runs the launcher window with the alphabetical grid extension enabled."""

    def __init__(self):
        super().__init__(
            application_id=APPLICATION_ID, flags=Gio.ApplicationFlags.FLAGS_NONE
        )
        self.paths = PathHandler()
        self.logger = setup_logging(log_file=self.paths.get_state_path("alphagrid.log"))
        self.window: Optional[LauncherWindow] = None
        self.extension: Optional[AppGridExtension] = None
        self.settings: Optional[ExtensionSettings] = None
        self.app_system: Optional[gio_backend.AppSystem] = None

    def do_activate(self):
        if self.window is not None:
            self.window.present()
            return
        try:
            shell_settings = gio_backend.open_shell_settings()
            folder_settings = gio_backend.open_folder_settings()
        except gio_backend.MissingSchemaError as e:
            self.logger.error(f"Cannot start the launcher: {e}")
            self.quit()
            return
        self.settings = ExtensionSettings(self.paths.get_config_file(), self.logger)
        self.app_system = gio_backend.AppSystem()
        overview = Overview()
        grid = AppGridView(
            self.app_system,
            folder_settings,
            gio_backend.open_folder,
            overview,
            self.logger,
        )
        self.window = LauncherWindow(self, grid)
        shell = ShellContext(
            grid=grid,
            overview=overview,
            state_adjustment=self.window.state_adjustment,
            app_system=self.app_system,
            shell_settings=shell_settings,
            folder_settings=folder_settings,
            open_folder=gio_backend.open_folder,
        )
        self.extension = AppGridExtension(shell, self.settings, self.logger)
        self.extension.enable()
        self.window.present()
        self.logger.info("alphagrid launcher started.")

    def do_shutdown(self):
        if self.extension is not None:
            self.extension.disable()
        if self.settings is not None:
            self.settings.close()
        if self.app_system is not None:
            self.app_system.close()
        self.logger.info("alphagrid launcher stopped.")
        Gtk.Application.do_shutdown(self)


def main(argv: Optional[List[str]] = None) -> int:
    app = AlphaGridApplication()
    return app.run(sys.argv if argv is None else argv)


if __name__ == "__main__":
    sys.exit(main())
