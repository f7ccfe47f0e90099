# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""SQLAlchemy engine factory for the SQL blob backend."""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from planning.core.config import settings


def build_engine(url: str | None = None) -> Engine:
    """Create an engine for `url` (defaults to settings.DATABASE_URL)."""
    return create_engine(url or settings.DATABASE_URL, pool_pre_ping=True)
