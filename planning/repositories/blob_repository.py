# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: namespaced key-value blob storage for the persisted document.
Backends raise StorageError; deciding what to do about it is the caller's job.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from planning.core.errors import StorageError


class BlobRepository(Protocol):
    def read(self, key: str) -> Optional[str]: ...

    def write(self, key: str, value: str) -> None: ...


class InMemoryBlobRepository:
    """Dict-backed blobs (tests, ephemeral sessions)."""

    def __init__(self) -> None:
        self._blobs: dict[str, str] = {}

    def read(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def write(self, key: str, value: str) -> None:
        self._blobs[key] = value

    @property
    def blobs(self) -> dict[str, str]:
        return self._blobs


class FileBlobRepository:
    """One `<key>.json` file per namespace inside a directory."""

    def __init__(self, directory: str | os.PathLike) -> None:
        self._directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Cannot read {path}: {exc}") from exc

    def write(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            # Write then rename so a crash never leaves a truncated document.
            fd, tmp_name = tempfile.mkstemp(dir=self._directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except OSError as exc:
            raise StorageError(f"Cannot write {path}: {exc}") from exc


class SqlBlobRepository:
    """Blobs stored as rows of a single `planning_blobs` table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._ensure_table()

    def _ensure_table(self) -> None:
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    text(
                        """
                        CREATE TABLE IF NOT EXISTS planning_blobs (
                            blob_key VARCHAR(255) PRIMARY KEY,
                            blob_value TEXT NOT NULL
                        )
                        """
                    )
                )
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot prepare blob table: {exc}") from exc

    def read(self, key: str) -> Optional[str]:
        try:
            with self._engine.connect() as conn:
                row = conn.execute(
                    text("SELECT blob_value FROM planning_blobs WHERE blob_key = :key"),
                    {"key": key},
                ).fetchone()
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot read blob '{key}': {exc}") from exc
        return row[0] if row else None

    def write(self, key: str, value: str) -> None:
        params = {"key": key, "value": value}
        try:
            with self._engine.begin() as conn:
                result = conn.execute(
                    text("UPDATE planning_blobs SET blob_value = :value WHERE blob_key = :key"),
                    params,
                )
                if result.rowcount == 0:
                    conn.execute(
                        text(
                            "INSERT INTO planning_blobs (blob_key, blob_value) "
                            "VALUES (:key, :value)"
                        ),
                        params,
                    )
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot write blob '{key}': {exc}") from exc
