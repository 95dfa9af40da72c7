"""Error types raised by sources and storage backends.

The store catches both and surfaces them as a dismissible message; nothing
in the derivation or ordering code raises for malformed data.
"""
from __future__ import annotations


class TaskGlitchError(Exception):
    """Base class for application errors."""


class LoadError(TaskGlitchError):
    """Initial task data could not be fetched or parsed."""


class PersistenceError(TaskGlitchError):
    """The storage backend failed to read or write the task list."""
