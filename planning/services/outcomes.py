# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service helpers for rejected mutations: log, count, return a typed result.
"""

import logging

from pydantic import ValidationError

from planning.metrics.prometheus import MUTATIONS_REJECTED
from planning.schemas.planning import MutationResult, MutationStatus

_TIME_FIELDS = {"start_time", "end_time", "startTime", "endTime"}


def reject(
    logger: logging.Logger,
    operation: str,
    status: MutationStatus,
    message: str,
    record=None,
) -> MutationResult:
    """Build a rejected result. State must not have been touched."""
    MUTATIONS_REJECTED.labels(operation=operation, reason=status.value).inc()
    logger.warning(
        "%s rejected (%s): %s", operation, status.value, message,
        extra={"operation": operation, "reason": status.value},
    )
    return MutationResult.rejected(status, message, record=record)


def reject_invalid(
    logger: logging.Logger, operation: str, exc: ValidationError
) -> MutationResult:
    """Map a pydantic ValidationError onto invalid_time_range or invalid_input."""
    fields = {str(err["loc"][0]) for err in exc.errors() if err.get("loc")}
    status = (
        MutationStatus.INVALID_TIME_RANGE
        if fields & _TIME_FIELDS
        else MutationStatus.INVALID_INPUT
    )
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err['msg']}"
        for err in exc.errors()
    )
    return reject(logger, operation, status, details)
