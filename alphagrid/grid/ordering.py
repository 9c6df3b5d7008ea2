from functools import cmp_to_key
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from alphagrid.grid.items import FolderPosition, GridItem, OrderingConfig

FOLDER_CHILDREN_KEY = "folder-children"
FOLDER_APPS_KEY = "apps"

NameKey = Tuple[int, str]


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def name_key(name: Optional[str]) -> NameKey:
    """Case-insensitive sort key; missing names sort after every named entry."""
    if not isinstance(name, str) or not name:
        return (1, "")
    return (0, name.casefold())


def pin_rank(item: GridItem, pinned_folder_ids: Sequence[str]) -> int:
    """
    Position of a folder in the curated folder order. Apps and folders that
    are not listed share the rank after the last listed folder.
    """
    if item.is_folder:
        try:
            return list(pinned_folder_ids).index(item.id)
        except ValueError:
            pass
    return len(pinned_folder_ids)


def ordering_key(
    item: GridItem,
    folder_position: FolderPosition,
    pinned_folder_ids: Sequence[str],
) -> tuple:
    """
    Builds the total-order key used by compare_items.

    FIRST and LAST put every folder into its own bucket ahead of or behind
    the apps, ranked by pin position and then by name. DEFAULT interleaves
    folders and apps by name alone; pin rank only separates equal names.
    """
    rank = pin_rank(item, pinned_folder_ids)
    if folder_position is FolderPosition.FIRST:
        bucket = 0 if item.is_folder else 1
        return (bucket, rank, name_key(item.display_name))
    if folder_position is FolderPosition.LAST:
        bucket = 1 if item.is_folder else 0
        return (bucket, rank, name_key(item.display_name))
    return (name_key(item.display_name), rank)


def compare_items(
    item_a: GridItem,
    item_b: GridItem,
    folder_position: FolderPosition,
    pinned_folder_ids: Sequence[str],
) -> int:
    """
    Orders two grid items for the given folder position.

    Args:
        item_a: Left operand.
        item_b: Right operand.
        folder_position: Where folders sort relative to apps.
        pinned_folder_ids: Manually curated folder order.
    Returns:
        -1, 0 or 1. Zero only when both items share the same key, so a stable
        sort keeps their original relative order.
    """
    return _cmp(
        ordering_key(item_a, folder_position, pinned_folder_ids),
        ordering_key(item_b, folder_position, pinned_folder_ids),
    )


def sort_items(items: Iterable[GridItem], config: OrderingConfig) -> List[GridItem]:
    def compare(a: GridItem, b: GridItem) -> int:
        return compare_items(a, b, config.folder_position, config.pinned_folder_ids)

    return sorted(items, key=cmp_to_key(compare))


def app_name(app: Any) -> Optional[str]:
    """The name an app is sorted by, both in the grid and inside folders."""
    if app is None:
        return None
    name = app.get_name()
    return name if isinstance(name, str) and name else None


def _app_display_name(app_id: str, lookup_app: Callable[[str], Any]) -> Optional[str]:
    return app_name(lookup_app(app_id))


def order_by_display_name(
    app_ids: Sequence[str], lookup_app: Callable[[str], Any]
) -> List[str]:
    """
    Sorts desktop ids by the display name the app inventory reports for them.
    Ids the inventory cannot resolve keep their relative order at the end.
    """
    named = [(app_id, _app_display_name(app_id, lookup_app)) for app_id in app_ids]
    named.sort(key=lambda entry: name_key(entry[1]))
    return [app_id for app_id, _ in named]


def reorder_folder_contents(
    folder_settings: Any,
    open_folder: Callable[[str], Any],
    lookup_app: Callable[[str], Any],
    logger: Any = None,
) -> List[str]:
    """
    Alphabetically sorts the apps stored inside every app folder.

    Each folder's `apps` list is rewritten only when its order changes and
    the key is writable, so running this twice is the same as running it once.

    Args:
        folder_settings: The `org.gnome.desktop.app-folders` settings store.
        open_folder: Returns the per-folder settings store for a folder id.
        lookup_app: Resolves a desktop id to an app exposing get_name().
        logger: Optional logger for per-folder diagnostics.
    Returns:
        The ids of the folders whose contents were rewritten.
    """
    rewritten: List[str] = []
    for folder_id in folder_settings.get_strv(FOLDER_CHILDREN_KEY):
        folder = open_folder(folder_id)
        if folder is None:
            continue
        current_order = list(folder.get_strv(FOLDER_APPS_KEY))
        new_order = order_by_display_name(current_order, lookup_app)
        if new_order == current_order:
            continue
        if not folder.is_writable(FOLDER_APPS_KEY):
            if logger:
                logger.debug(f"Folder '{folder_id}' apps key is read-only, skipping")
            continue
        folder.set_strv(FOLDER_APPS_KEY, new_order)
        rewritten.append(folder_id)
        if logger:
            logger.debug(f"Reordered contents of folder '{folder_id}'")
    return rewritten


def reload_app_grid(grid: Any) -> None:
    """
    Rebuilds the host grid in comparator order.

    Installed in place of the host's `_redisplay`; it never calls the
    original. The host's `_compare_items` slot is looked up at call time so
    the patched comparator is the one that runs.
    """
    was_updating = grid._updating_pages
    grid._updating_pages = True
    try:
        items = list(grid._load_apps())
        items.sort(key=cmp_to_key(grid._compare_items))
        grid._set_ordered_items(items)
    finally:
        grid._updating_pages = was_updating
    emit = getattr(grid, "emit", None)
    if callable(emit):
        emit("view-loaded")
