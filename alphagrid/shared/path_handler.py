import os
from pathlib import Path


class PathHandler:
    """
    Resolves alphagrid's paths following the XDG Base Directory Specification.
    """

    def __init__(self, app_name: str = "alphagrid"):
        self.app_name = app_name
        self._home = Path.home()

    def _get_xdg_base_dir(self, env_var: str, default_path: Path) -> Path:
        """Helper to get XDG base directory with fallback."""
        path_str = os.getenv(env_var)
        if path_str:
            return Path(path_str)
        return default_path

    def get_config_dir(self) -> Path:
        """
        Returns $XDG_CONFIG_HOME/alphagrid or ~/.config/alphagrid, creating it
        if it does not exist.
        """
        config_home = self._get_xdg_base_dir("XDG_CONFIG_HOME", self._home / ".config")
        config_dir = config_home / self.app_name
        config_dir.mkdir(parents=True, exist_ok=True)
        return config_dir

    def get_config_file(self) -> Path:
        return self.get_config_dir() / "config.toml"

    def get_state_path(self, *path_parts) -> str:
        """
        Returns a path inside the user's XDG state directory and creates its
        parent directories if they do not exist.
        """
        state_home = self._get_xdg_base_dir(
            "XDG_STATE_HOME", self._home / ".local" / "state"
        )
        path = state_home / self.app_name / Path(*path_parts)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)
