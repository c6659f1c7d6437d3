"""Prometheus metrics for Grilette.

All metric objects are defined here so they can be imported from any module.
"""

from prometheus_client import Counter

# ---------------------------------------------------------------------------
# Repository metrics
# ---------------------------------------------------------------------------

NOTE_OPERATIONS = Counter(
    "grilette_note_operations_total",
    "Total number of note repository operations",
    ["operation", "outcome"],  # outcome: applied, ignored
)

# ---------------------------------------------------------------------------
# Storage metrics
# ---------------------------------------------------------------------------

STORAGE_FAILURES = Counter(
    "grilette_storage_failures_total",
    "Persistence reads or writes that failed and were degraded",
    ["operation"],  # read, write
)
