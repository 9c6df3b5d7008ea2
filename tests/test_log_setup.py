import json
import logging

import pytest

from alphagrid.core.log_setup import (
    LOGGER_NAME,
    BurstFilter,
    ToggleLogAdapter,
    default_log_file,
    setup_logging,
)
from fakes import RecordingLogger


@pytest.fixture
def clean_logger():
    yield
    std_logger = logging.getLogger(LOGGER_NAME)
    for handler in std_logger.handlers[:]:
        handler.close()
        std_logger.removeHandler(handler)


def test_adapter_gates_info_and_debug():
    recorder = RecordingLogger()
    adapter = ToggleLogAdapter(recorder)

    adapter.info("hidden")
    adapter.debug("hidden")
    adapter.warning("shown")
    adapter.error("shown too")

    assert recorder.records == [("warning", "shown"), ("error", "shown too")]

    adapter.enabled = True
    adapter.info("now visible")

    assert recorder.messages("info") == ["now visible"]


def test_adapter_binds_caller_context():
    calls = []

    class Capture:
        def warning(self, message, **kwargs):
            calls.append(kwargs)

    ToggleLogAdapter(Capture()).warning("look here")

    assert calls[0]["caller"]["func"] == "test_adapter_binds_caller_context"
    assert calls[0]["caller"]["file"] == "test_log_setup.py"


def test_adapter_delegates_unknown_attributes():
    recorder = RecordingLogger()

    assert ToggleLogAdapter(recorder).messages() == []


def test_burst_filter_collapses_repeated_triggers():
    burst = BurstFilter()

    def record(message):
        return logging.makeLogRecord({"msg": message})

    assert burst.filter(record("Folders changed, triggering reorder"))
    assert not burst.filter(record("Folders changed, triggering reorder"))
    assert burst.filter(record("Reordering folder contents"))
    assert burst.filter(record("Reordering folder contents"))
    assert burst.filter(record("Folders changed, triggering reorder"))


def test_default_log_file_honours_xdg_state_home(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path))

    assert default_log_file() == str(tmp_path / "alphagrid" / "alphagrid.log")


def test_setup_logging_writes_json_lines(tmp_path, clean_logger):
    log_file = tmp_path / "state" / "alphagrid.log"

    logger = setup_logging(log_file=str(log_file))
    logger.warning("Grid reordered", items=3)

    entry = json.loads(log_file.read_text().splitlines()[-1])
    assert entry["event"] == "Grid reordered"
    assert entry["level"] == "warning"
    assert entry["items"] == 3


def test_file_and_console_each_show_a_trigger_line_once(tmp_path, clean_logger):
    setup_logging(log_file=str(tmp_path / "alphagrid.log"))
    std_logger = logging.getLogger(LOGGER_NAME)
    emitted = {}
    for handler in std_logger.handlers:
        name = type(handler).__name__
        emitted[name] = 0

        def count(record, name=name):
            emitted[name] += 1

        handler.emit = count

    std_logger.info("Favourite apps changed, triggering reorder")
    std_logger.info("Favourite apps changed, triggering reorder")

    assert emitted == {"RotatingFileHandler": 1, "RichHandler": 1}
