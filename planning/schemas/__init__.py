# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Store-boundary contracts: drafts, patches, persisted document, results."""
from planning.schemas.planning import (
    InterventionDraft,
    InterventionPatch,
    MutationResult,
    MutationStatus,
    PlanningDocument,
)

__all__ = [
    "InterventionDraft",
    "InterventionPatch",
    "MutationResult",
    "MutationStatus",
    "PlanningDocument",
]
