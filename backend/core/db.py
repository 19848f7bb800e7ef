import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from core.config import settings

logger = logging.getLogger(__name__)

_local_engine = None


def create_local_engine(uri: str) -> Engine:
    """
    SQLAlchemy engine for the local-device store.
    In-memory SQLite shares one connection so every caller sees the same data.
    """
    if uri.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if uri in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(uri, **kwargs)
    return create_engine(uri)


def get_local_engine() -> Engine:
    """Get or create the engine bound to LOCAL_DB_URI"""
    global _local_engine
    if _local_engine is None:
        _local_engine = create_local_engine(settings.LOCAL_DB_URI)
        logger.info(f"Local inventory store at {settings.LOCAL_DB_URI}")
    return _local_engine
