import os
import toml
import time
from pathlib import Path
from typing import Any, Dict, List, Optional
from alphagrid.shared import config_template
from alphagrid.shared.signals import SignalSource


class ExtensionSettings(SignalSource):
    """
    The extension's own key-value settings, stored in the alphagrid section of
    config.toml.

    Handles file I/O, merging with the defaults template, file change
    monitoring (via GIO) and change notification. Every key whose value
    differs after a reload or a set_* call is announced with a
    `changed::<key>` signal, so handlers connected to plain `changed` see
    every key, mirroring Gio.Settings.
    """

    def __init__(
        self,
        config_file: Path,
        logger: Any,
        section: str = config_template.SECTION,
        watch: bool = True,
    ):
        """
        Loads the configuration and optionally starts the file change monitor.
        Args:
            config_file: Path of the config.toml to read and write.
            logger: Logger used for load/save diagnostics.
            section: Top-level table holding the extension keys.
            watch: Start a Gio.FileMonitor on the file.
        """
        super().__init__()
        self.logger = logger
        self.section = section
        self.default_config = config_template.default_config
        self.config_file = Path(config_file)
        self.config_monitor: Optional[Any] = None
        self._last_mod_time: float = 0.0
        self._load_successful: bool = False
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        self.config_data = self.load_config()
        if watch:
            self._start_watcher()

    def close(self) -> None:
        """Stops the GIO file monitor."""
        if self.config_monitor:
            self.config_monitor.cancel()
            self.config_monitor = None

    def _strip_hints(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Recursively removes keys ending with '_hint' from a template dictionary.
        Args:
            data: The configuration dictionary, typically self.default_config.
        Returns:
            A dictionary containing only configuration values.
        """
        stripped_data = {}
        for key, value in data.items():
            if key.endswith("_hint"):
                continue
            if isinstance(value, dict):
                stripped_data[key] = self._strip_hints(value)
            else:
                stripped_data[key] = value
        return stripped_data

    @property
    def default_config_stripped(self) -> Dict[str, Any]:
        return self._strip_hints(self.default_config)

    def _recursive_merge(
        self,
        user_config: Dict[str, Any],
        default_config: Dict[str, Any],
    ) -> bool:
        """
        Recursively merges missing keys from `default_config` into `user_config`.
        Returns:
            True if any key was added, indicating a write-back is needed.
        """
        write_back_needed = False
        for key, default_value in default_config.items():
            if key not in user_config:
                user_config[key] = default_value
                write_back_needed = True
            elif isinstance(default_value, dict) and isinstance(
                user_config.get(key), dict
            ):
                if self._recursive_merge(user_config[key], default_value):
                    write_back_needed = True
        return write_back_needed

    def load_config(self) -> Dict[str, Any]:
        """
        Loads the configuration from file, or uses defaults if missing/corrupt.
        Returns:
            The loaded and merged configuration dictionary.
        """
        config_from_file: Dict[str, Any] = {}
        file_must_be_created = not self.config_file.exists()
        load_succeeded = False
        if file_must_be_created:
            self.logger.info("Config file is missing. Will apply defaults and create.")
            load_succeeded = True
        else:
            max_retries = 3
            retry_delay_seconds = 0.1
            for attempt in range(max_retries):
                try:
                    with open(self.config_file, "r") as f:
                        config_from_file = toml.load(f)
                    load_succeeded = True
                    self._last_mod_time = os.path.getmtime(self.config_file)
                    break
                except (OSError, toml.TomlDecodeError) as e:
                    self.logger.error(
                        f"Error loading config file on attempt {attempt + 1}: {e}. Retrying..."
                    )
                    time.sleep(retry_delay_seconds)
            else:
                self.logger.error(
                    "Failed to load config file after all retries. Using default configuration and skipping file save to preserve user data."
                )
                config_from_file = {}
        self._load_successful = load_succeeded
        self._recursive_merge(config_from_file, self.default_config_stripped)
        if file_must_be_created:
            self.logger.info(
                "Saving default configuration to file because it was missing."
            )
            self._write(config_from_file)
        self.logger.debug("Configuration loaded and merged with defaults.")
        return config_from_file

    def _write(self, data: Dict[str, Any]) -> bool:
        try:
            with open(self.config_file, "w") as f:
                toml.dump(data, f)
            self._last_mod_time = os.path.getmtime(self.config_file)
            return True
        except OSError as e:
            self.logger.error(f"Failed to save configuration to file: {e}")
            return False

    def save_config(self) -> bool:
        """Writes the current state of self.config_data to the TOML file."""
        if not self._load_successful:
            self.logger.warning(
                "Skipping configuration save: Configuration is in an untrusted state (load failed). Please fix config.toml manually."
            )
            return False
        return self._write(self.config_data)

    def reload_config(self) -> None:
        """Re-reads the file and announces every key that changed."""
        previous = dict(self._section())
        self.config_data = self.load_config()
        self.logger.info("Configuration reloaded from file.")
        self._emit_changes(previous, self._section())

    def _emit_changes(self, previous: Dict[str, Any], current: Dict[str, Any]) -> None:
        for key in sorted(set(previous) | set(current)):
            if previous.get(key) != current.get(key):
                self.emit(f"changed::{key}", key)

    def _on_config_file_changed(self, monitor, file, other_file, event_type) -> None:
        """
        Callback triggered by the GIO file monitor when config.toml changes.
        Debounces changes using file modification time before triggering reload.
        """
        from gi.repository import Gio  # pyright: ignore

        if event_type not in (
            Gio.FileMonitorEvent.CHANGES_DONE_HINT,
            Gio.FileMonitorEvent.MOVED,
            Gio.FileMonitorEvent.CHANGED,
        ):
            return
        try:
            current_mod_time = os.path.getmtime(self.config_file)
        except FileNotFoundError:
            self.logger.warning("Config file not found during GIO change check.")
            return
        if current_mod_time > self._last_mod_time:
            self.reload_config()
        else:
            self.logger.debug("Change event received but ignored due to debounce.")

    def _start_watcher(self) -> None:
        """Starts the GIO file monitor for real-time config updates."""
        from gi.repository import GLib, Gio  # pyright: ignore

        gio_config_file = Gio.File.new_for_path(str(self.config_file))
        try:
            self.config_monitor = gio_config_file.monitor_file(
                Gio.FileMonitorFlags.NONE, None
            )
        except GLib.Error as e:
            self.logger.error(f"Failed to start Gio.FileMonitor: {e}")
            return
        self.config_monitor.connect("changed", self._on_config_file_changed)

    def _section(self) -> Dict[str, Any]:
        section = self.config_data.get(self.section)
        return section if isinstance(section, dict) else {}

    def _default_for(self, key: str) -> Any:
        return self.default_config_stripped.get(self.section, {}).get(key)

    def get_value(self, key: str, default_value: Any = None) -> Any:
        return self._section().get(key, default_value)

    def get_boolean(self, key: str) -> bool:
        value = self.get_value(key)
        if isinstance(value, bool):
            return value
        return self._fallback(key, value, "a boolean")

    def get_string(self, key: str) -> str:
        value = self.get_value(key)
        if isinstance(value, str):
            return value
        return self._fallback(key, value, "a string")

    def get_strv(self, key: str) -> List[str]:
        value = self.get_value(key)
        if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
            return list(value)
        return list(self._fallback(key, value, "a list of strings") or [])

    def _fallback(self, key: str, value: Any, expected: str) -> Any:
        default = self._default_for(key)
        self.logger.warning(
            f"Setting '{key}' should be {expected}, got {value!r}. Using default {default!r}."
        )
        return default

    def is_writable(self, key: str) -> bool:
        return self._load_successful

    def set_value(self, key: str, new_value: Any) -> bool:
        """
        Sets a key in the extension section, saves the file and emits
        `changed::<key>` when the value actually changed.
        """
        if not self._load_successful:
            self.logger.warning(
                f"Update to key {key} skipped: Config file failed to load. Please fix config.toml manually."
            )
            return False
        section = self.config_data.setdefault(self.section, {})
        previous = section.get(key)
        section[key] = new_value
        saved = self.save_config()
        if previous != new_value:
            self.emit(f"changed::{key}", key)
        return saved

    def set_boolean(self, key: str, value: bool) -> bool:
        return self.set_value(key, bool(value))

    def set_string(self, key: str, value: str) -> bool:
        return self.set_value(key, str(value))

    def set_strv(self, key: str, value: List[str]) -> bool:
        return self.set_value(key, [str(v) for v in value])
