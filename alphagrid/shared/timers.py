from typing import Any, Callable, Set

from gi.repository import GLib  # pyright: ignore


class TimeoutHelper:
    """
    Schedules one-shot and repeating callbacks on the GLib main loop and keeps
    track of every live source so they can all be removed on disable.
    """

    def __init__(self, logger: Any = None):
        self.logger = logger
        self._sources: Set[int] = set()

    def timeout_add(self, interval_ms: int, func: Callable, *args) -> int:
        """
        Runs `func(*args)` after `interval_ms` milliseconds. The source stays
        tracked until the callback returns GLib.SOURCE_REMOVE (or any falsy
        value) or the source is removed.
        """
        source_id = 0

        def wrapper():
            keep = False
            try:
                keep = bool(func(*args))
            finally:
                if not keep:
                    self._sources.discard(source_id)
            return GLib.SOURCE_CONTINUE if keep else GLib.SOURCE_REMOVE

        source_id = GLib.timeout_add(interval_ms, wrapper)
        self._sources.add(source_id)
        if self.logger:
            self.logger.debug(
                f"Scheduled {getattr(func, '__name__', func)} in {interval_ms}ms."
            )
        return source_id

    def source_remove(self, source_id: int) -> bool:
        """Removes a pending source. Already-fired or unknown ids are ignored."""
        if source_id not in self._sources:
            return False
        self._sources.discard(source_id)
        return GLib.source_remove(source_id)

    def cleanup(self) -> None:
        for source_id in list(self._sources):
            self.source_remove(source_id)
        if self.logger:
            self.logger.debug("Timeout sources cleanup complete.")
