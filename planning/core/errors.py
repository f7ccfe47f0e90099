# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Error taxonomy for the planning core.

Store mutators do not raise these for rejected input; they return a
MutationResult whose status maps onto one of the classes below.
"""


class PlanningError(Exception):
    """Base class for every planning-core error."""

    status = "error"


class CapacityExceeded(PlanningError):
    """Too many technicians assigned to one intervention."""

    status = "capacity_exceeded"


class InvalidTimeRange(PlanningError):
    """End time not strictly after start time, or unparseable time."""

    status = "invalid_time_range"


class NotFound(PlanningError, KeyError):
    """Mutation or lookup on an unknown id."""

    status = "not_found"

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class InvalidColor(PlanningError):
    """Technician color outside the fixed palette."""

    status = "invalid_color"


class DuplicateName(PlanningError):
    status = "duplicate_name"


class DuplicateText(PlanningError):
    status = "duplicate_text"


class InvalidInput(PlanningError):
    """Malformed record data (bad date, wrong field type)."""

    status = "invalid_input"


class StorageError(PlanningError):
    """Persisted document could not be read or written."""

    status = "storage_error"


class AttachmentError(PlanningError):
    """The external attachment store refused or failed an operation."""

    status = "attachment_error"


ERRORS_BY_STATUS: dict[str, type[PlanningError]] = {
    cls.status: cls
    for cls in (
        CapacityExceeded,
        InvalidTimeRange,
        NotFound,
        InvalidColor,
        DuplicateName,
        DuplicateText,
        InvalidInput,
    )
}
