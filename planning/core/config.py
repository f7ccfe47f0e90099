# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration — all env-driven, zero hardcode.
Single source of truth for every tunable parameter.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "planning")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # ── Persistence ──
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "file").lower()
    STORAGE_PATH: str = os.getenv("STORAGE_PATH", os.path.expanduser("~/.planning"))
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///planning.db")
    STORAGE_NAMESPACE: str = os.getenv("STORAGE_NAMESPACE", "edetel-planning")
    AUTOSAVE: bool = os.getenv("AUTOSAVE", "true").lower() == "true"

    # ── Scheduling rules ──
    OPERATING_WINDOW_START: str = os.getenv("OPERATING_WINDOW_START", "06:00")
    OPERATING_WINDOW_END: str = os.getenv("OPERATING_WINDOW_END", "20:00")
    SLOT_MINUTES: int = int(os.getenv("SLOT_MINUTES", "30"))
    MAX_TECHNICIANS_PER_INTERVENTION: int = int(
        os.getenv("MAX_TECHNICIANS_PER_INTERVENTION", "4")
    )
    DEFAULT_TOP_TECHNICIANS: int = int(os.getenv("DEFAULT_TOP_TECHNICIANS", "5"))
    DEFAULT_TOP_KEYWORDS: int = int(os.getenv("DEFAULT_TOP_KEYWORDS", "10"))

    # ── Attachment object store ──
    ATTACHMENT_STORE_URL: str = os.getenv("ATTACHMENT_STORE_URL", "")
    ATTACHMENT_STORE_KEY: str = os.getenv("ATTACHMENT_STORE_KEY", "")
    ATTACHMENT_BUCKET: str = os.getenv("ATTACHMENT_BUCKET", "interventions_pdfs")
    ATTACHMENT_TIMEOUT: float = float(os.getenv("ATTACHMENT_TIMEOUT", "10.0"))


settings = Settings()
