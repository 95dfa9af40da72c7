from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union


_NOISY_LOGGERS = ("urllib3", "sqlalchemy.engine", "watchdog", "tornado.access")
_HANDLER_TAG = "_taskglitch_handler"


class _ConsoleNoiseFilter(logging.Filter):
    """Keep task_glitch logs; let third-party loggers through at WARNING+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("task_glitch") or record.name == "__main__":
            return True
        return record.levelno >= logging.WARNING


def setup_logging(
    level: Union[int, str] = logging.INFO,
    *,
    log_dir: Optional[Union[str, Path]] = None,
) -> None:
    """Configure console (and optional file) logging.

    Streamlit reruns the app script on every interaction, so handlers we
    installed earlier are replaced instead of stacked.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    for h in list(root.handlers):
        if getattr(h, _HANDLER_TAG, False):
            root.removeHandler(h)
    root.setLevel(min(level, logging.DEBUG) if log_dir else level)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    setattr(ch, _HANDLER_TAG, True)
    root.addHandler(ch)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path / "taskglitch.log"), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        setattr(fh, _HANDLER_TAG, True)
        root.addHandler(fh)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
