"""Sales task tracker: normalization, derived metrics, ordering and a session task store."""

__version__ = "0.1.0"
