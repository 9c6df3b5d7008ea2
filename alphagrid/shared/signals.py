from itertools import count
from typing import Any, Callable, Dict, Tuple

_HANDLER_IDS = count(1)


class SignalSource:
    """
    Minimal in-process signal emitter with GObject detailed-signal semantics.

    `connect("changed::key", cb)` only fires for that detail, while
    `connect("changed", cb)` fires for every detail. Callbacks receive the
    emitting object first, followed by the emitted arguments and any user
    data passed to connect(), exactly like a GObject handler.
    """

    def __init__(self):
        self._handlers: Dict[int, Tuple[str, Callable, tuple]] = {}

    def connect(self, detailed_signal: str, callback: Callable, *user_data: Any) -> int:
        handler_id = next(_HANDLER_IDS)
        self._handlers[handler_id] = (detailed_signal, callback, user_data)
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        """Removes a handler; unknown ids are ignored."""
        self._handlers.pop(handler_id, None)

    def handler_is_connected(self, handler_id: int) -> bool:
        return handler_id in self._handlers

    def emit(self, detailed_signal: str, *args: Any) -> None:
        name, _, detail = detailed_signal.partition("::")
        for handler_id, (signal, callback, user_data) in list(self._handlers.items()):
            if handler_id not in self._handlers:
                continue
            if signal == name or (detail and signal == detailed_signal):
                callback(self, *args, *user_data)

    @property
    def handler_count(self) -> int:
        return len(self._handlers)
