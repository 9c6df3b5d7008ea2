"""GTK4 launcher window hosting the app grid the extension keeps sorted."""

import gi
from functools import cmp_to_key
from typing import Any, Callable, Dict, List, Optional

gi.require_version("Gtk", "4.0")
gi.require_version("Gdk", "4.0")
from gi.repository import Gdk, Gio, GLib, GObject, Gtk, Pango  # pyright: ignore

from alphagrid.grid.items import GridItem, ItemKind
from alphagrid.grid.ordering import app_name, name_key
from alphagrid.host.interfaces import ControlsState
from alphagrid.shared.signals import SignalSource

ICON_SIZE = 64
FOLDER_APP_ICON_SIZE = 48
FOLDER_ICON = "folder"
FALLBACK_APP_ICON = "application-x-executable-symbolic"


class Overview(SignalSource):
    """Emits `item-drag-end` when the user drops an icon somewhere in the grid."""


class AppGridView(SignalSource):
    """
    The launcher's grid-display component.

    Exposes the slots the extension patches: `_redisplay` rebuilds the whole
    grid, `_compare_items` orders two items, and `_updating_pages` is true
    while a rebuild is running. Without the extension, items keep the
    arrangement the user dragged them into and new items are appended by name.
    """

    def __init__(
        self,
        app_system: Any,
        folder_settings: Any,
        open_folder: Callable[[str], Any],
        overview: Overview,
        logger: Any,
    ):
        super().__init__()
        self.app_system = app_system
        self.folder_settings = folder_settings
        self.open_folder = open_folder
        self.overview = overview
        self.logger = logger
        self._updating_pages = False
        self._items: List[GridItem] = []
        self._layout: List[str] = []
        self._widgets: Dict[str, Gtk.Widget] = {}
        self.flowbox = Gtk.FlowBox()
        self.flowbox.set_valign(Gtk.Align.START)
        self.flowbox.set_max_children_per_line(6)
        self.flowbox.set_homogeneous(True)
        self.flowbox.set_selection_mode(Gtk.SelectionMode.NONE)
        self.flowbox.set_activate_on_single_click(True)
        self.flowbox.add_css_class("alphagrid-flowbox")
        self.flowbox.connect("child-activated", self.on_child_activated)

    @property
    def ordered_items(self) -> List[GridItem]:
        return list(self._items)

    def _load_apps(self) -> List[GridItem]:
        """Collects the folders and every installed app not stored in a folder."""
        items: List[GridItem] = []
        in_folder = set()
        for folder_id in self.folder_settings.get_strv("folder-children"):
            folder = self.open_folder(folder_id)
            if folder is None:
                continue
            apps = folder.get_strv("apps")
            if not apps:
                continue
            in_folder.update(apps)
            display_name = folder.get_string("name") or folder_id
            items.append(GridItem(folder_id, ItemKind.FOLDER, display_name))
        for app in self.app_system.get_installed():
            app_id = app.get_id()
            if not app_id or app_id in in_folder:
                continue
            items.append(GridItem(app_id, ItemKind.APP, app_name(app)))
        return items

    def _layout_position(self, item: GridItem) -> int:
        try:
            return self._layout.index(item.id)
        except ValueError:
            return len(self._layout)

    def _compare_items(self, a: GridItem, b: GridItem) -> int:
        pos_a, pos_b = self._layout_position(a), self._layout_position(b)
        if pos_a != pos_b:
            return (pos_a > pos_b) - (pos_a < pos_b)
        key_a, key_b = name_key(a.display_name), name_key(b.display_name)
        return (key_a > key_b) - (key_a < key_b)

    def _redisplay(self) -> None:
        self._updating_pages = True
        try:
            items = self._load_apps()
            items.sort(key=cmp_to_key(self._compare_items))
            self._set_ordered_items(items)
        finally:
            self._updating_pages = False
        self.emit("view-loaded")

    def _set_ordered_items(self, items: List[GridItem]) -> None:
        """Replaces the flowbox children with `items`, in order."""
        self._items = list(items)
        child = self.flowbox.get_first_child()
        while child:
            next_child = child.get_next_sibling()
            self.flowbox.remove(child)
            child = next_child
        self._widgets.clear()
        for item in self._items:
            widget = self._create_item_widget(item)
            self._widgets[item.id] = widget
            self.flowbox.append(widget)
        self.logger.debug(f"Grid now shows {len(self._items)} items")

    def _create_item_widget(self, item: GridItem) -> Gtk.Widget:
        vbox = Gtk.Box.new(Gtk.Orientation.VERTICAL, 5)
        vbox.set_halign(Gtk.Align.CENTER)
        vbox.set_valign(Gtk.Align.CENTER)
        vbox.add_css_class("alphagrid-item")
        vbox.grid_item = item  # pyright: ignore
        if item.is_folder:
            image = Gtk.Image.new_from_icon_name(FOLDER_ICON)
        else:
            image = self._app_image(item.id)
        image.set_pixel_size(ICON_SIZE)
        label = Gtk.Label.new(item.display_name or item.id)
        label.set_max_width_chars(16)
        label.set_ellipsize(Pango.EllipsizeMode.END)
        label.add_css_class("alphagrid-label")
        vbox.append(image)
        vbox.append(label)

        drag_source = Gtk.DragSource.new()
        drag_source.set_actions(Gdk.DragAction.MOVE)
        drag_source.connect("prepare", self.on_drag_prepare, item.id)
        drag_source.connect("drag-end", self.on_drag_end)
        vbox.add_controller(drag_source)

        drop_target = Gtk.DropTarget.new(GObject.TYPE_STRING, Gdk.DragAction.MOVE)
        drop_target.connect("drop", self.on_drop, item.id)
        vbox.add_controller(drop_target)
        return vbox

    def _app_image(self, app_id: str) -> Gtk.Image:
        app = self.app_system.lookup_app(app_id)
        icon = app.get_icon() if app is not None else None
        if icon is None:
            icon = Gio.ThemedIcon.new_with_default_fallbacks(FALLBACK_APP_ICON)
        return Gtk.Image.new_from_gicon(icon)

    def on_drag_prepare(self, source, x, y, item_id):
        return Gdk.ContentProvider.new_for_value(item_id)

    def on_drag_end(self, source, drag, delete_data):
        self.overview.emit("item-drag-end")

    def on_drop(self, target, value, x, y, target_id):
        if not isinstance(value, str) or value == target_id:
            return False
        # the dragged widget is rebuilt by move_item, so leave the drop handler first
        GLib.idle_add(self.move_item, value, target_id)
        return True

    def move_item(self, item_id: str, before_id: str) -> bool:
        """Moves an item in front of another one and remembers the arrangement."""
        order = [item.id for item in self._items if item.id != item_id]
        if item_id not in self._widgets or before_id not in order:
            return GLib.SOURCE_REMOVE
        order.insert(order.index(before_id), item_id)
        self._layout = order
        by_id = {item.id: item for item in self._items}
        self._set_ordered_items([by_id[i] for i in order])
        return GLib.SOURCE_REMOVE

    def on_child_activated(self, flowbox, child):
        item = getattr(child.get_child(), "grid_item", None)
        if item is None:
            return
        if item.is_folder:
            self.open_folder_popover(child, item)
            return
        app = self.app_system.lookup_app(item.id)
        if app is None:
            self.logger.warning(f"App '{item.id}' is no longer installed")
            return
        try:
            app.launch([], None)
        except GLib.Error as e:
            self.logger.error(f"Failed to launch '{item.id}': {e}")

    def open_folder_popover(self, parent: Gtk.Widget, item: GridItem) -> None:
        """Shows the folder's apps in the order stored in its settings."""
        folder = self.open_folder(item.id)
        if folder is None:
            return
        popover = Gtk.Popover()
        popover.set_parent(parent)
        popover.set_has_arrow(False)
        popover.add_css_class("alphagrid-folder-popover")
        folder_box = Gtk.FlowBox()
        folder_box.set_max_children_per_line(4)
        folder_box.set_selection_mode(Gtk.SelectionMode.NONE)
        for app_id in folder.get_strv("apps"):
            app = self.app_system.lookup_app(app_id)
            if app is None:
                continue
            button = Gtk.Button(has_frame=False)
            content = Gtk.Box.new(Gtk.Orientation.VERTICAL, 5)
            image = self._app_image(app_id)
            image.set_pixel_size(FOLDER_APP_ICON_SIZE)
            content.append(image)
            content.append(Gtk.Label.new(app_name(app) or app_id))
            button.set_child(content)

            def on_clicked(_, launch=app):
                popover.popdown()
                launch.launch([], None)

            button.connect("clicked", on_clicked)
            folder_box.append(button)
        popover.set_child(folder_box)
        popover.connect("closed", lambda p: p.unparent())
        popover.popup()


class LauncherWindow(Gtk.ApplicationWindow):
    """
    Top-level launcher window. Its `state_adjustment` moves to APP_GRID
    whenever the window is mapped and back to HIDDEN when it is unmapped.
    """

    def __init__(self, application: Gtk.Application, grid: AppGridView):
        super().__init__(application=application, title="Applications")
        self.grid = grid
        self.set_default_size(900, 640)
        self.state_adjustment = Gtk.Adjustment(
            value=ControlsState.HIDDEN,
            lower=ControlsState.HIDDEN,
            upper=ControlsState.APP_GRID,
            step_increment=1,
            page_increment=1,
            page_size=0,
        )
        scrolled_window = Gtk.ScrolledWindow()
        scrolled_window.set_policy(Gtk.PolicyType.NEVER, Gtk.PolicyType.AUTOMATIC)
        scrolled_window.set_child(grid.flowbox)
        self.set_child(scrolled_window)
        self.connect("map", self.on_map)
        self.connect("unmap", self.on_unmap)

    def on_map(self, *_):
        self.state_adjustment.set_value(ControlsState.APP_GRID)

    def on_unmap(self, *_):
        self.state_adjustment.set_value(ControlsState.HIDDEN)

    @property
    def view_state(self) -> Optional[ControlsState]:
        try:
            return ControlsState(int(self.state_adjustment.get_value()))
        except ValueError:
            return None
