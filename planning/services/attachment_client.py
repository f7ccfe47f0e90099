# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Attachment client — PDF uploads to the hosted object store.
Talks to a Supabase-compatible storage REST API with httpx. The store
itself only keeps the returned url / name on the intervention.
"""

import uuid
from typing import Optional

import httpx

from planning.core.config import settings
from planning.core.errors import AttachmentError
from planning.core.logging import get_logger
from planning.metrics.prometheus import ATTACHMENT_OPERATIONS
from planning.utils.timeslots import now_ms

logger = get_logger(__name__)


class AttachmentClient:
    """Upload / delete intervention documents in one storage bucket."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        bucket: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = (base_url or settings.ATTACHMENT_STORE_URL).rstrip("/")
        self._api_key = api_key or settings.ATTACHMENT_STORE_KEY
        self._bucket = bucket or settings.ATTACHMENT_BUCKET
        self._timeout = timeout or settings.ATTACHMENT_TIMEOUT
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self._base_url,
            timeout=self._timeout,
            headers={
                "apikey": self._api_key,
                "Authorization": f"Bearer {self._api_key}",
            },
            transport=self._transport,
        )

    def public_url(self, path: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{self._bucket}/{path}"

    def object_path(self, url: str) -> Optional[str]:
        """Object path inside the bucket for a public url, None if foreign."""
        marker = f"/{self._bucket}/"
        if marker not in url:
            return None
        return url.rsplit(marker, 1)[-1] or None

    def upload(
        self,
        file_bytes: bytes,
        content_type: str = "application/pdf",
        filename: str = "document.pdf",
    ) -> dict[str, str]:
        """
        Store a file under a unique name and return {"url", "name"}, where
        name is the original filename. Raises AttachmentError.
        """
        extension = filename.rsplit(".", 1)[-1] if "." in filename else "pdf"
        object_name = f"{now_ms()}-{uuid.uuid4().hex[:12]}.{extension}"
        try:
            with self._client() as client:
                resp = client.post(
                    f"/storage/v1/object/{self._bucket}/{object_name}",
                    content=file_bytes,
                    headers={"Content-Type": content_type, "x-upsert": "false"},
                )
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            ATTACHMENT_OPERATIONS.labels(operation="upload", status="error").inc()
            logger.error("Attachment upload failed: name=%s, error=%s", filename, exc)
            raise AttachmentError(f"Upload of '{filename}' failed: {exc}") from exc

        ATTACHMENT_OPERATIONS.labels(operation="upload", status="ok").inc()
        logger.info("Attachment uploaded: name=%s, object=%s", filename, object_name)
        return {"url": self.public_url(object_name), "name": filename}

    def delete(self, url: str) -> None:
        """Remove the object behind a public url. Failures are logged but never raised."""
        path = self.object_path(url)
        if path is None:
            logger.warning("Attachment delete skipped: url outside bucket %s", self._bucket)
            return
        try:
            with self._client() as client:
                resp = client.request(
                    "DELETE",
                    f"/storage/v1/object/{self._bucket}",
                    json={"prefixes": [path]},
                )
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            ATTACHMENT_OPERATIONS.labels(operation="delete", status="error").inc()
            logger.warning("Attachment delete failed: object=%s, error=%s", path, exc)
            return
        ATTACHMENT_OPERATIONS.labels(operation="delete", status="ok").inc()
        logger.info("Attachment deleted: object=%s", path)
