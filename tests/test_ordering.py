from itertools import permutations

import pytest

from alphagrid.grid.items import FolderPosition, GridItem, ItemKind, OrderingConfig
from alphagrid.grid.ordering import compare_items, reload_app_grid, sort_items
from alphagrid.shared.signals import SignalSource
from fakes import FakeGrid, app, folder

ALL_POSITIONS = [FolderPosition.FIRST, FolderPosition.LAST, FolderPosition.DEFAULT]


def names(items):
    return [item.display_name for item in items]


def test_folders_first_scenario(grid_items):
    ordered = sort_items(grid_items, OrderingConfig(FolderPosition.FIRST))

    assert names(ordered) == ["Abc Folder", "Apple", "Zed"]


def test_default_scenario_is_plain_alphabetical(grid_items):
    ordered = sort_items(grid_items, OrderingConfig(FolderPosition.DEFAULT))

    assert names(ordered) == ["Abc Folder", "Apple", "Zed"]


def test_folders_last_scenario(grid_items):
    ordered = sort_items(grid_items, OrderingConfig(FolderPosition.LAST))

    assert names(ordered) == ["Apple", "Zed", "Abc Folder"]


def test_default_interleaves_folders_with_apps():
    items = [folder("z", "Zoo"), app("b", "banana"), folder("c", "Cherry"), app("a", "Apricot")]

    ordered = sort_items(items, OrderingConfig(FolderPosition.DEFAULT))

    assert names(ordered) == ["Apricot", "banana", "Cherry", "Zoo"]


@pytest.mark.parametrize("position", ALL_POSITIONS)
@pytest.mark.parametrize("kind", [ItemKind.APP, ItemKind.FOLDER])
def test_same_kind_follows_case_insensitive_names(position, kind):
    words = ["apple", "Banana", "cherry", "Date", "eLDERBERRY"]
    items = [GridItem(w, kind, w) for w in words]

    for a, b in permutations(items, 2):
        expected = (a.display_name.lower() > b.display_name.lower()) - (
            a.display_name.lower() < b.display_name.lower()
        )
        assert compare_items(a, b, position, []) == expected
        assert compare_items(a, b, position, []) == -compare_items(b, a, position, [])


@pytest.mark.parametrize("pinned", [[], ["f-b"], ["f-a", "f-b"]])
def test_folder_against_app_respects_position(pinned):
    apps = [app("a-1", "Aardvark"), app("z-1", "Zebra")]
    folders = [folder("f-a", "Alpha"), folder("f-b", "Omega")]

    for f in folders:
        for a in apps:
            assert compare_items(f, a, FolderPosition.FIRST, pinned) < 0
            assert compare_items(f, a, FolderPosition.LAST, pinned) > 0


@pytest.mark.parametrize("position", ALL_POSITIONS)
def test_comparator_is_transitive(position):
    pinned = ["f-3", "f-1"]
    items = [
        app("a-1", "Mango"),
        app("a-2", "apple"),
        app("a-3", None),
        folder("f-1", "Zulu"),
        folder("f-2", "Alpha"),
        folder("f-3", "Mango"),
        folder("f-4", "mango"),
    ]

    for a, b, c in permutations(items, 3):
        ab = compare_items(a, b, position, pinned)
        bc = compare_items(b, c, position, pinned)
        ac = compare_items(a, c, position, pinned)
        if ab <= 0 and bc <= 0:
            assert ac <= 0
        if ab == 0 and bc == 0:
            assert ac == 0


def test_pinned_folders_lead_their_bucket():
    items = [
        folder("games", "Games"),
        folder("office", "Office"),
        folder("utils", "Utilities"),
        app("firefox", "Firefox"),
    ]

    ordered = sort_items(items, OrderingConfig(FolderPosition.FIRST, ("utils", "office")))

    assert [item.id for item in ordered] == ["utils", "office", "games", "firefox"]


def test_pinned_folders_follow_apps_when_last():
    items = [folder("games", "Games"), folder("utils", "Utilities"), app("firefox", "Firefox")]

    ordered = sort_items(items, OrderingConfig(FolderPosition.LAST, ("utils",)))

    assert [item.id for item in ordered] == ["firefox", "utils", "games"]


def test_default_uses_pin_rank_only_for_equal_folder_names():
    items = [folder("tools-2", "Tools"), folder("tools-1", "Tools"), folder("art", "Art")]

    ordered = sort_items(items, OrderingConfig(FolderPosition.DEFAULT, ("tools-1", "art")))

    assert [item.id for item in ordered] == ["art", "tools-1", "tools-2"]


def test_missing_display_name_sorts_after_named_items():
    items = [app("nameless", None), app("b", "Beta"), folder("f", ""), app("a", "Alpha")]

    ordered = sort_items(items, OrderingConfig(FolderPosition.DEFAULT))

    assert [item.id for item in ordered] == ["a", "b", "nameless", "f"]


def test_equal_names_keep_original_order():
    items = [app("first", "Terminal"), app("second", "terminal"), app("third", "TERMINAL")]

    assert compare_items(items[0], items[1], FolderPosition.DEFAULT, []) == 0
    assert [i.id for i in sort_items(items, OrderingConfig())] == ["first", "second", "third"]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("start", FolderPosition.FIRST),
        ("Top", FolderPosition.FIRST),
        ("first", FolderPosition.FIRST),
        ("end", FolderPosition.LAST),
        ("bottom", FolderPosition.LAST),
        (" last ", FolderPosition.LAST),
        ("alphabetical", FolderPosition.DEFAULT),
        ("default", FolderPosition.DEFAULT),
        ("sideways", FolderPosition.DEFAULT),
        ("", FolderPosition.DEFAULT),
        (None, FolderPosition.DEFAULT),
    ],
)
def test_folder_position_parse(raw, expected):
    assert FolderPosition.parse(raw) is expected


def test_reload_app_grid_sorts_with_the_current_comparator(grid_items):
    grid = FakeGrid(grid_items)
    grid._compare_items = lambda a, b: compare_items(a, b, FolderPosition.LAST, [])

    reload_app_grid(grid)

    assert grid.displayed_names == ["Apple", "Zed", "Abc Folder"]
    assert grid._updating_pages is False
    assert grid.original_redisplay_calls == 0


def test_reload_app_grid_flags_pages_while_rebuilding(grid_items):
    seen = []

    class Grid(FakeGrid):
        def _set_ordered_items(self, items):
            seen.append(self._updating_pages)
            super()._set_ordered_items(items)

    grid = Grid(grid_items)
    reload_app_grid(grid)

    assert seen == [True]
    assert grid._updating_pages is False


def test_reload_app_grid_keeps_the_hosts_own_update_flag(grid_items):
    grid = FakeGrid(grid_items)
    grid._updating_pages = True

    reload_app_grid(grid)

    assert grid._updating_pages is True
    assert len(grid.displayed) == 1


def test_reload_app_grid_restores_flag_when_loading_fails(grid_items):
    class BrokenGrid(FakeGrid):
        def _load_apps(self):
            raise RuntimeError("inventory unavailable")

    grid = BrokenGrid(grid_items)

    with pytest.raises(RuntimeError):
        reload_app_grid(grid)

    assert grid._updating_pages is False


def test_reload_app_grid_announces_view_loaded(grid_items):
    class SignallingGrid(FakeGrid, SignalSource):
        def __init__(self, items):
            FakeGrid.__init__(self, items)
            SignalSource.__init__(self)

    grid = SignallingGrid(grid_items)
    loaded = []
    grid.connect("view-loaded", lambda source: loaded.append(source))

    reload_app_grid(grid)

    assert loaded == [grid]
