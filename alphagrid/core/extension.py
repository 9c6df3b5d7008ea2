from typing import Any, Optional

from alphagrid.core.log_setup import ToggleLogAdapter
from alphagrid.grid.sync import LOGGING_ENABLED_KEY, AppGridSync
from alphagrid.host.interfaces import ShellContext


class AppGridExtension:
    """
    Entry and exit points of the alphabetical app grid, called by the host
    when the extension is switched on and off.
    """

    def __init__(
        self,
        shell: ShellContext,
        settings: Any,
        logger: Any,
        timers: Any = None,
    ):
        self.shell = shell
        self.settings = settings
        self.logger = ToggleLogAdapter(logger)
        self._timers = timers
        self._grid_reorder: Optional[AppGridSync] = None

    @property
    def enabled(self) -> bool:
        return self._grid_reorder is not None

    @property
    def grid_reorder(self) -> Optional[AppGridSync]:
        return self._grid_reorder

    def enable(self) -> None:
        """Patch the shell, start listening and reorder the grid once."""
        if self._grid_reorder is not None:
            self.logger.warning("Extension is already enabled.")
            return
        self.logger.enabled = self.settings.get_boolean(LOGGING_ENABLED_KEY)
        self._grid_reorder = AppGridSync(
            self.shell, self.settings, self.logger, timers=self._timers
        )
        self.shell.grid._redisplay()
        self._grid_reorder.patch_shell()
        self._grid_reorder.start_listeners()
        self._grid_reorder.reorder_grid("Reordering app grid")

    def disable(self) -> None:
        """Disconnect every listener, cancel the pending redisplay and unpatch."""
        if self._grid_reorder is None:
            return
        self._grid_reorder.disconnect_listeners()
        self._grid_reorder.unpatch_shell()
        self._grid_reorder = None
