# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics — single source of truth for all metric objects.
Updated by the service layer only.
"""

from prometheus_client import Counter, Gauge

# ── Store mutations ──
INTERVENTIONS_CREATED = Counter(
    "planning_interventions_created_total",
    "Total interventions created",
)
MUTATIONS_REJECTED = Counter(
    "planning_mutations_rejected_total",
    "Store mutations rejected without changing state",
    ["operation", "reason"],
)
KEYWORDS_CREATED = Counter(
    "planning_keywords_created_total",
    "Keyword dictionary entries created",
    ["kind"],
)
INTERVENTIONS_STORED = Gauge(
    "planning_interventions_stored",
    "Number of interventions currently in the store",
)
ACTIVE_TECHNICIANS = Gauge(
    "planning_active_technicians",
    "Number of active technicians",
)

# ── Boundaries ──
PERSISTENCE_SAVES = Counter(
    "planning_persistence_saves_total",
    "Persisted document writes",
    ["status"],
)
PERSISTENCE_LOADS = Counter(
    "planning_persistence_loads_total",
    "Persisted document reads at startup",
    ["status"],
)
ATTACHMENT_OPERATIONS = Counter(
    "planning_attachment_operations_total",
    "Calls to the external attachment store",
    ["operation", "status"],
)
