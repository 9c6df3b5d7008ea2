import os
import inspect
import logging
from logging.handlers import RotatingFileHandler
from typing import Any, Optional
import structlog
from structlog.stdlib import ProcessorFormatter, BoundLogger, add_logger_name
from structlog.processors import (
    JSONRenderer,
    TimeStamper,
    add_log_level,
    StackInfoRenderer,
    format_exc_info,
)
from rich.logging import RichHandler
from structlog.dev import ConsoleRenderer


APP_DIR = "alphagrid"
LOGGER_NAME = "alphabetical-app-grid"


def default_log_file() -> str:
    xdg_state_home = os.environ.get("XDG_STATE_HOME") or os.path.expanduser(
        "~/.local/state"
    )
    return os.path.join(xdg_state_home, APP_DIR, "alphagrid.log")


class BurstFilter(logging.Filter):
    """Collapses runs of identical 'triggering reorder' lines into one."""

    def __init__(self):
        super().__init__()
        self._last_message: Optional[str] = None

    def filter(self, record):
        message = record.getMessage()
        if "triggering reorder" in message and message == self._last_message:
            return False
        self._last_message = message
        return True


SHARED_PROCESSORS = [
    add_log_level,
    TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
    StackInfoRenderer(),
    format_exc_info,
]


def _json_file_handler(log_file: str, level: int) -> RotatingFileHandler:
    """Rotating JSON-lines log, one event per line, kept to three files."""
    os.makedirs(os.path.dirname(log_file), exist_ok=True)
    handler = RotatingFileHandler(
        log_file, maxBytes=1024 * 1024, backupCount=2, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=SHARED_PROCESSORS + [add_logger_name],
            processor=JSONRenderer(),
        )
    )
    return handler


def _rich_console_handler(level: int) -> RichHandler:
    handler = RichHandler(
        rich_tracebacks=True, markup=True, show_path=False, show_time=False
    )
    handler.setLevel(level)
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=SHARED_PROCESSORS,
            processor=ConsoleRenderer(colors=False),
            fmt="%(message)s",
        )
    )
    return handler


def setup_logging(
    level: int = logging.DEBUG, log_file: Optional[str] = None
) -> BoundLogger:
    """
    Routes alphagrid's structlog events to a JSON log file and the terminal.

    Calling it again replaces the handlers installed by the previous call.
    Each handler carries its own BurstFilter, since a filter sees every
    record once per handler it is attached to.
    """
    structlog.configure(
        processors=[*SHARED_PROCESSORS, add_logger_name, ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    alphagrid_logger = logging.getLogger(LOGGER_NAME)
    alphagrid_logger.setLevel(level)
    alphagrid_logger.propagate = False
    for old_handler in list(alphagrid_logger.handlers):
        alphagrid_logger.removeHandler(old_handler)
        old_handler.close()
    for handler in (
        _json_file_handler(log_file or default_log_file(), level),
        _rich_console_handler(level),
    ):
        handler.addFilter(BurstFilter())
        alphagrid_logger.addHandler(handler)
    return structlog.get_logger(LOGGER_NAME)


class ToggleLogAdapter:
    """
    Wraps the structlog logger behind the extension's `logging-enabled` switch.

    info and debug lines are dropped while the switch is off; warnings and
    errors always go through. The caller's file, function and line are bound
    onto each event so grid diagnostics can be traced back to their trigger.
    """

    def __init__(self, logger: Any, enabled: bool = False):
        self._logger = logger
        self.enabled = enabled
        self._own_filename = os.path.basename(__file__)

    def _get_caller_context(self):
        frame = inspect.currentframe()
        if not frame:
            return {}
        f = frame.f_back
        while f:
            caller_file = os.path.basename(f.f_code.co_filename)
            if caller_file != self._own_filename:
                context = {
                    "file": caller_file,
                    "func": f.f_code.co_name,
                    "line": f.f_lineno,
                }
                del f
                del frame
                return context
            f = f.f_back
        del frame
        return {}

    def _log_with_context(self, level: str, message: str, **kwargs):
        context = self._get_caller_context()
        if context:
            kwargs.setdefault("caller", context)
        getattr(self._logger, level)(message, **kwargs)

    def info(self, message: str, **kwargs):
        if self.enabled:
            self._log_with_context("info", message, **kwargs)

    def debug(self, message: str, **kwargs):
        if self.enabled:
            self._log_with_context("debug", message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log_with_context("warning", message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log_with_context("error", message, **kwargs)

    def exception(self, message: str, **kwargs):
        self._log_with_context("exception", message, **kwargs)

    def __getattr__(self, name):
        return getattr(self._logger, name)
