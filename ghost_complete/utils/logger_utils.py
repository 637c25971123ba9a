# logger_utils.py - logging messages and timing metrics for the engine

import logging
import os
import time
from typing import Optional

LOGGER_NAME = "ghost_complete"

_logger = logging.getLogger(LOGGER_NAME)
_logger.addHandler(logging.NullHandler())


class _ColorFormatter(logging.Formatter):
    """Console formatter: [YYYY-MM-DD HH:MM:SS] LEVEL   | message, colored by level."""

    COLORS = {
        "DEBUG": "\033[90m",    # gray
        "INFO": "\033[94m",     # blue
        "WARNING": "\033[93m",  # yellow
        "ERROR": "\033[91m",    # red
        "RESET": "\033[0m",
    }

    def __init__(self, use_color: bool = True):
        super().__init__("[%(asctime)s] %(levelname)-7s | %(message)s", "%Y-%m-%d %H:%M:%S")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        if self.use_color and record.levelname in self.COLORS:
            return f"{self.COLORS[record.levelname]}{line}{self.COLORS['RESET']}"
        return line


class Log:
    """
    Thin facade over the `ghost_complete` stdlib logger.
    Library code calls Log.write(...) and never installs handlers itself;
    applications (the CLI, tests) call Log.configure() when they want output.
    """

    @staticmethod
    def configure(path: Optional[str] = None, level: str = "INFO", use_color: bool = True,
                  console: bool = True) -> logging.Logger:
        """
        Attach a console handler and, if `path` is given, an append-mode file handler.
        Calling it again replaces the handlers installed by a previous call.
        """
        for h in list(_logger.handlers):
            if getattr(h, "_ghost_complete", False):
                _logger.removeHandler(h)
                h.close()

        if console:
            sh = logging.StreamHandler()
            sh.setFormatter(_ColorFormatter(use_color))
            sh._ghost_complete = True
            _logger.addHandler(sh)

        if path:
            folder = os.path.dirname(path)
            if folder:
                os.makedirs(folder, exist_ok=True)
            fh = logging.FileHandler(path, encoding="utf-8")
            fh.setFormatter(_ColorFormatter(use_color=False))
            fh._ghost_complete = True
            _logger.addHandler(fh)

        _logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        return _logger

    @staticmethod
    def write(msg: str, level: str = "INFO") -> None:
        _logger.log(getattr(logging, level.upper(), logging.INFO), msg)

    @staticmethod
    def debug(msg: str) -> None:
        _logger.debug(msg)

    @staticmethod
    def info(msg: str) -> None:
        _logger.info(msg)

    @staticmethod
    def warning(msg: str) -> None:
        _logger.warning(msg)

    @staticmethod
    def error(msg: str) -> None:
        _logger.error(msg)

    @staticmethod
    def metric(tag: str, value, unit: str = "") -> None:
        """
        Record a metric (timings, counts).
        Example: flush done: 0.002s
        """
        _logger.debug(f"{tag}: {value}{unit}")

    @staticmethod
    def time_block(label: str) -> "_Timer":
        """
        Measure execution time of a code block:
            with Log.time_block("flush"):
                scheduler.flush()
        """
        return _Timer(label)


class _Timer:
    """Context manager used internally to measure time for a code block."""

    def __init__(self, label: str):
        self.label = label
        self.start = time.perf_counter()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        dur = round(time.perf_counter() - self.start, 6)
        Log.metric(f"{self.label} done", dur, "s")
        return False
