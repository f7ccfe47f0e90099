# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — pure data structures, no storage or business rules.

Attribute names are snake_case; the persisted document uses camelCase
(startTime, technicianIds, usageCount, ...) through the alias generator.
"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Any clock time; the slot grid is enforced on writes, not on stored records.
TIME_PATTERN = r"^(?:[01]\d|2[0-3]):[0-5]\d$"


class Record(BaseModel):
    """Common config: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> dict:
        """JSON-ready dict in the persisted (camelCase) shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Intervention(Record):
    """A scheduled field job."""
    id: str
    date: dt.date
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    technician_ids: list[str] = Field(default_factory=list)
    task_text: str = ""
    equipment: Optional[str] = None
    notes: Optional[str] = None
    address: Optional[str] = None
    tenant_name: Optional[str] = None
    phone: Optional[str] = None
    pdf_url: Optional[str] = None
    pdf_name: Optional[str] = None
    created_at: int
    updated_at: int

    @property
    def primary_technician_id(self) -> Optional[str]:
        return self.technician_ids[0] if self.technician_ids else None


class Technician(Record):
    """A field worker. Deactivation is soft; records are never deleted."""
    id: str
    name: str = Field(..., min_length=1)
    color: str
    is_active: bool = True
    usage_count: int = 0
    created_at: int
    updated_at: int


class Keyword(Record):
    """Autocomplete entry for task descriptions or equipment."""
    id: str
    text: str = Field(..., min_length=1)
    shortcut: Optional[str] = None
    usage_count: int = 0
    is_default: bool = False
