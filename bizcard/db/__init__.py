"""Database helpers (engine/session export)."""

from .session import Base, get_engine, get_session
from . import models, events  # noqa: F401  # register tables and slug listeners

__all__ = ["Base", "get_engine", "get_session"]
