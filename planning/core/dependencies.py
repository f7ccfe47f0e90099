# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Dependency wiring — build the blob backend, persistence adapter, store and
attachment client once, and hand out the shared instances.
"""

from typing import Optional

from planning.core.config import settings
from planning.core.database import build_engine
from planning.core.logging import get_logger
from planning.repositories.blob_repository import (
    BlobRepository,
    FileBlobRepository,
    InMemoryBlobRepository,
    SqlBlobRepository,
)
from planning.services.attachment_client import AttachmentClient
from planning.services.persistence import PersistenceAdapter
from planning.services.planning_store import PlanningStore

logger = get_logger(__name__)

_store: Optional[PlanningStore] = None
_attachment_client: Optional[AttachmentClient] = None


def build_blob_repository(backend: Optional[str] = None) -> BlobRepository:
    """Blob backend named by STORAGE_BACKEND: file, sql or memory."""
    selected = (backend or settings.STORAGE_BACKEND).lower()
    if selected == "file":
        return FileBlobRepository(settings.STORAGE_PATH)
    if selected == "sql":
        return SqlBlobRepository(build_engine())
    if selected == "memory":
        return InMemoryBlobRepository()
    raise ValueError(f"Unknown STORAGE_BACKEND '{selected}'")


def build_store(blob_repo: Optional[BlobRepository] = None) -> PlanningStore:
    """A store bound to `blob_repo` (or the configured backend), already loaded."""
    persistence = PersistenceAdapter(blob_repo or build_blob_repository())
    store = PlanningStore(persistence=persistence)
    store.load()
    logger.info(
        "Planning store ready: backend=%s, namespace=%s",
        settings.STORAGE_BACKEND,
        persistence.namespace,
    )
    return store


# ── Shared instances ──
def get_store() -> PlanningStore:
    global _store
    if _store is None:
        _store = build_store()
    return _store


def get_attachment_client() -> AttachmentClient:
    global _attachment_client
    if _attachment_client is None:
        _attachment_client = AttachmentClient()
    return _attachment_client


def reset() -> None:
    """Drop the shared instances (tests, reconfiguration)."""
    global _store, _attachment_client
    _store = None
    _attachment_client = None
