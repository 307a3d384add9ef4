"""Storage adaptors and backend selection"""

import logging

from .. import config
from .base import Adaptor
from .memory import MemoryAdaptor

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_URL = "sqlite:///./jellifit.db"


def create_adaptor() -> Adaptor:
    """Build the adaptor selected by STORAGE_BACKEND"""
    backend = config.STORAGE_BACKEND
    if backend == "memory":
        logger.info("Storage backend: memory")
        return MemoryAdaptor()
    if backend == "sql":
        # Imported lazily so the memory backend works without a database driver
        from .sql import SqlAdaptor

        logger.info("Storage backend: sql")
        return SqlAdaptor(config.DATABASE_URL or DEFAULT_SQLITE_URL)
    raise RuntimeError(f"Unknown STORAGE_BACKEND '{backend}' (expected 'memory' or 'sql')")


__all__ = ["Adaptor", "MemoryAdaptor", "create_adaptor"]
