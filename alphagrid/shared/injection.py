from typing import Any, Callable, Dict, List, Tuple

_UNSET = object()


class InjectionManager:
    """
    Overrides named methods on live host objects and puts them back.

    Every override records what the attribute looked like before it was
    replaced: an instance attribute is restored to its previous value, a
    method that came from the class is restored by deleting the instance
    attribute again. Only what was overridden is ever touched on restore.
    """

    def __init__(self, logger: Any = None):
        self.logger = logger
        self._overrides: Dict[Tuple[int, str], Tuple[Any, str, Any]] = {}
        self._order: List[Tuple[int, str]] = []

    def override_method(
        self,
        target: Any,
        method_name: str,
        create_override: Callable[[Any], Callable],
    ) -> Callable:
        """
        Replaces `target.method_name` with the callable built by `create_override`.

        Args:
            target: The host object to patch.
            method_name: Attribute name of the method slot.
            create_override: Factory receiving the current implementation and
                returning the replacement.
        Returns:
            The installed replacement.
        """
        key = (id(target), method_name)
        original = getattr(target, method_name)
        if key not in self._overrides:
            previous = vars(target).get(method_name, _UNSET)
            self._overrides[key] = (target, method_name, previous)
            self._order.append(key)
        replacement = create_override(original)
        setattr(target, method_name, replacement)
        if self.logger:
            self.logger.debug(f"Overrode {type(target).__name__}.{method_name}")
        return replacement

    def clear(self) -> None:
        """Restores every override, most recent first. Safe to call repeatedly."""
        while self._order:
            key = self._order.pop()
            self._restore(*self._overrides.pop(key))

    def is_overridden(self, target: Any, method_name: str) -> bool:
        return (id(target), method_name) in self._overrides

    def _restore(self, target: Any, method_name: str, previous: Any) -> None:
        if previous is _UNSET:
            if method_name in vars(target):
                delattr(target, method_name)
        else:
            setattr(target, method_name, previous)
        if self.logger:
            self.logger.debug(f"Restored {type(target).__name__}.{method_name}")
