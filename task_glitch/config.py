from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


STORAGE_BACKENDS = ("sql", "memory")
DEFAULT_APP_TITLE = "Task Glitch"
DEFAULT_APP_ICON = "📈"


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class AppConfig:
    """Runtime configuration for the tracker.

    Env-first with local-dev defaults:
    - TASKGLITCH_DATABASE_URL / DATABASE_URL: SQL storage URL. Defaults to
      SQLite at data/taskglitch.db.
    - TASKGLITCH_STORAGE: sql|memory (default: sql). ``memory`` keeps tasks
      for the browser session only.
    - TASKGLITCH_TASKS_SOURCE: path or http(s) URL of the initial JSON task
      list (default: data/tasks.json).
    - TASKGLITCH_FETCH_TIMEOUT: seconds for a remote source (default: 10)
    - TASKGLITCH_SEED_COUNT: synthetic tasks when no data exists (default: 30)
    - TASKGLITCH_LOG_LEVEL (default: INFO)
    - TASKGLITCH_LOG_DIR: write taskglitch.log there when set
    - TASKGLITCH_APP_TITLE / TASKGLITCH_APP_ICON: browser tab title and icon
    """

    database_url: str
    storage_backend: str
    tasks_source: str
    fetch_timeout: int
    seed_count: int
    log_level: str
    log_dir: Optional[Path]
    app_title: str = DEFAULT_APP_TITLE
    app_icon: str = DEFAULT_APP_ICON

    @classmethod
    def from_env(cls) -> "AppConfig":
        db_url = (
            os.environ.get("TASKGLITCH_DATABASE_URL")
            or os.environ.get("DATABASE_URL")
            or ""
        ).strip()
        if not db_url:
            data_dir = _repo_root() / "data"
            db_url = f"sqlite:///{(data_dir / 'taskglitch.db').as_posix()}"

        backend = (os.environ.get("TASKGLITCH_STORAGE") or "sql").lower().strip()
        if backend not in STORAGE_BACKENDS:
            backend = "sql"

        source = (os.environ.get("TASKGLITCH_TASKS_SOURCE") or "").strip()
        if not source:
            source = str(_repo_root() / "data" / "tasks.json")

        log_dir_raw = (os.environ.get("TASKGLITCH_LOG_DIR") or "").strip()

        return cls(
            database_url=db_url,
            storage_backend=backend,
            tasks_source=source,
            fetch_timeout=max(1, _env_int("TASKGLITCH_FETCH_TIMEOUT", 10)),
            seed_count=max(0, _env_int("TASKGLITCH_SEED_COUNT", 30)),
            log_level=(os.environ.get("TASKGLITCH_LOG_LEVEL") or "INFO").upper().strip(),
            log_dir=Path(log_dir_raw).expanduser() if log_dir_raw else None,
            app_title=(os.environ.get("TASKGLITCH_APP_TITLE") or "").strip() or DEFAULT_APP_TITLE,
            app_icon=(os.environ.get("TASKGLITCH_APP_ICON") or "").strip() or DEFAULT_APP_ICON,
        )

    def ensure_data_dir(self) -> None:
        """Create the directory of a file-based SQLite URL."""
        prefix = "sqlite:///"
        if self.storage_backend == "sql" and self.database_url.startswith(prefix):
            db_path = Path(self.database_url[len(prefix):])
            if str(db_path) not in ("", ":memory:"):
                db_path.parent.mkdir(parents=True, exist_ok=True)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return int(default)
    try:
        return int(str(raw).strip())
    except ValueError:
        return int(default)


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Configuration read once per process."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config
