"""Wire a :class:`TaskStore` from :class:`AppConfig`."""
from __future__ import annotations

from typing import Optional

from task_glitch.bootstrap import BootstrapLoader, source_for
from task_glitch.config import AppConfig, get_config
from task_glitch.storage import KeyValueStorage, MemoryStorage, SqlStorage
from task_glitch.store import TaskStore


def create_storage(config: AppConfig) -> KeyValueStorage:
    if config.storage_backend == "memory":
        return MemoryStorage()
    config.ensure_data_dir()
    return SqlStorage(config.database_url)


def create_store(config: Optional[AppConfig] = None, storage: Optional[KeyValueStorage] = None) -> TaskStore:
    config = config or get_config()
    storage = storage if storage is not None else create_storage(config)
    loader = BootstrapLoader(
        storage=storage,
        source=source_for(config.tasks_source, timeout=config.fetch_timeout),
    )
    return TaskStore(storage, loader, seed_count=config.seed_count)
