from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class ItemKind(Enum):
    APP = "app"
    FOLDER = "folder"


class FolderPosition(Enum):
    """Where folders land relative to apps in the grid."""

    FIRST = "start"
    LAST = "end"
    DEFAULT = "alphabetical"

    @classmethod
    def parse(cls, value: Optional[str]) -> "FolderPosition":
        """
        Maps a `folder-order-position` setting value to a FolderPosition.
        Unknown or missing values fall back to DEFAULT.
        """
        if not isinstance(value, str):
            return cls.DEFAULT
        return _POSITION_ALIASES.get(value.strip().lower(), cls.DEFAULT)

    @classmethod
    def is_known(cls, value: Optional[str]) -> bool:
        return isinstance(value, str) and value.strip().lower() in _POSITION_ALIASES


_POSITION_ALIASES = {
    "start": FolderPosition.FIRST,
    "first": FolderPosition.FIRST,
    "top": FolderPosition.FIRST,
    "end": FolderPosition.LAST,
    "last": FolderPosition.LAST,
    "bottom": FolderPosition.LAST,
    "alphabetical": FolderPosition.DEFAULT,
    "default": FolderPosition.DEFAULT,
}


@dataclass(frozen=True)
class GridItem:
    """
    An entry in the launcher collection, either an application shortcut or a
    folder. Items are owned by the host grid; this package only reads them.
    """

    id: str
    kind: ItemKind = ItemKind.APP
    display_name: Optional[str] = None

    @property
    def is_folder(self) -> bool:
        return self.kind is ItemKind.FOLDER


@dataclass(frozen=True)
class OrderingConfig:
    folder_position: FolderPosition = FolderPosition.DEFAULT
    pinned_folder_ids: Tuple[str, ...] = field(default_factory=tuple)
