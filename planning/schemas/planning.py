# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Input / output contracts of the store boundary.
Drafts and patches are validated here before any business rule runs.
"""

import datetime as dt
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from planning.core.errors import ERRORS_BY_STATUS, PlanningError
from planning.models.domain import TIME_PATTERN


class _Input(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _unique_in_order(ids: list[str]) -> list[str]:
    return list(dict.fromkeys(ids))


# ── Intervention Schemas ──

class InterventionDraft(_Input):
    """
    Everything needed to create an intervention (no id, no timestamps).
    Repeated technician ids are collapsed before the cap is checked: the
    cap counts distinct technicians.
    """
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

    @field_validator("technician_ids")
    @classmethod
    def dedupe_technician_ids(cls, value: list[str]) -> list[str]:
        return _unique_in_order(value)


class InterventionPatch(_Input):
    """Partial update; only fields explicitly set are merged."""
    date: Optional[dt.date] = None
    start_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    technician_ids: Optional[list[str]] = None
    task_text: Optional[str] = None
    equipment: Optional[str] = None
    notes: Optional[str] = None
    address: Optional[str] = None
    tenant_name: Optional[str] = None
    phone: Optional[str] = None
    pdf_url: Optional[str] = None
    pdf_name: Optional[str] = None

    @field_validator("technician_ids")
    @classmethod
    def dedupe_technician_ids(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        return None if value is None else _unique_in_order(value)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


# ── Persisted document ──

class PlanningDocument(_Input):
    """Outer shape of the persisted blob; records stay raw for migration."""
    interventions: dict[str, Any] = Field(default_factory=dict)
    technicians: dict[str, Any] = Field(default_factory=dict)
    task_keywords: dict[str, Any] = Field(default_factory=dict)
    equipment_keywords: dict[str, Any] = Field(default_factory=dict)
    selected_technician_filters: list[str] = Field(default_factory=list)

    @field_validator(
        "interventions", "technicians", "task_keywords", "equipment_keywords", mode="before"
    )
    @classmethod
    def drop_malformed_section(cls, value: Any) -> dict[str, Any]:
        """A section that is not an object is read as empty."""
        return value if isinstance(value, dict) else {}

    @field_validator("selected_technician_filters", mode="before")
    @classmethod
    def keep_string_ids(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]


# ── Mutation outcome ──

class MutationStatus(str, Enum):
    OK = "ok"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    INVALID_TIME_RANGE = "invalid_time_range"
    NOT_FOUND = "not_found"
    INVALID_COLOR = "invalid_color"
    DUPLICATE_NAME = "duplicate_name"
    DUPLICATE_TEXT = "duplicate_text"
    INVALID_INPUT = "invalid_input"


class MutationResult(BaseModel):
    """
    Outcome of a store mutation. A rejected mutation left state untouched;
    an accepted one carries the resulting record.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: MutationStatus = MutationStatus.OK
    record: Optional[Any] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is MutationStatus.OK

    @classmethod
    def accepted(cls, record: Any = None, message: str = "") -> "MutationResult":
        return cls(status=MutationStatus.OK, record=record, message=message)

    @classmethod
    def rejected(
        cls, status: MutationStatus, message: str, record: Any = None
    ) -> "MutationResult":
        return cls(status=status, record=record, message=message)

    def raise_for_status(self) -> "MutationResult":
        """Raise the matching PlanningError if rejected; return self otherwise."""
        if self.ok:
            return self
        error_cls = ERRORS_BY_STATUS.get(self.status.value, PlanningError)
        raise error_cls(self.message)
