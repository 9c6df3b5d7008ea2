import pytest

from alphagrid.core.log_setup import ToggleLogAdapter
from alphagrid.grid.sync import AppGridSync
from alphagrid.host.interfaces import ShellContext
from alphagrid.shared.signals import SignalSource
from fakes import (
    FakeAdjustment,
    FakeAppSystem,
    FakeGrid,
    FakeSettings,
    ManualTimers,
    RecordingLogger,
    app,
    folder,
)


@pytest.fixture
def grid_items():
    return [
        app("zed.desktop", "Zed"),
        folder("abc", "Abc Folder"),
        app("apple.desktop", "Apple"),
    ]


@pytest.fixture
def timers():
    return ManualTimers()


@pytest.fixture
def recorder():
    return RecordingLogger()


@pytest.fixture
def logger(recorder):
    return ToggleLogAdapter(recorder, enabled=True)


@pytest.fixture
def extension_settings():
    return FakeSettings(
        {
            "logging-enabled": True,
            "sort-folder-contents": True,
            "folder-order-position": "start",
            "pinned-folders": [],
        }
    )


@pytest.fixture
def folders():
    """Folder id -> per-folder settings store."""
    return {
        "utilities": FakeSettings(
            {"name": "Utilities", "apps": ["zsh.desktop", "calc.desktop", "bash.desktop"]}
        ),
        "office": FakeSettings({"name": "Office", "apps": ["writer.desktop"]}),
    }


@pytest.fixture
def app_system():
    return FakeAppSystem(
        {
            "zsh.desktop": "zsh",
            "calc.desktop": "Calculator",
            "bash.desktop": "Bash",
            "writer.desktop": "Writer",
        }
    )


@pytest.fixture
def shell(grid_items, folders, app_system):
    return ShellContext(
        grid=FakeGrid(grid_items),
        overview=SignalSource(),
        state_adjustment=FakeAdjustment(),
        app_system=app_system,
        shell_settings=FakeSettings({"favorite-apps": [], "app-picker-layout": []}),
        folder_settings=FakeSettings({"folder-children": list(folders)}),
        open_folder=folders.get,
    )


@pytest.fixture
def sync(shell, extension_settings, logger, timers):
    return AppGridSync(shell, extension_settings, logger, timers=timers)
