"""Contact submission services."""

from contactflow.services.reconciliation import Classification, ReconciliationEngine, classify
from contactflow.services.status_probe import StatusProbe

__all__ = [
    "Classification",
    "ReconciliationEngine",
    "StatusProbe",
    "classify",
]
