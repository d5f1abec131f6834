from __future__ import annotations

import logging
import sys
from pathlib import Path


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - all tasktrack / tasktrack_desktop logs
    - third-party and Python warnings only from ERROR up
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith(("tasktrack.", "tasktrack_desktop.")) or name in {"tasktrack", "tasktrack_desktop"}:
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path,
    console_level: int | str = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Configure the root logger with a filtered console handler and a file
    handler under ``log_dir``. Call once at start-up.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "tasktrack.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for handler in list(root.handlers):
        root.removeHandler(handler)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
