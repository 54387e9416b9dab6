"""Core reconciliation and refresh orchestration."""

from .reconciler import error_nodes, reconcile
from .session_keeper import CleanupCandidate, CleanupResult, SessionKeeper, Snapshot

__all__ = [
    "CleanupCandidate",
    "CleanupResult",
    "SessionKeeper",
    "Snapshot",
    "error_nodes",
    "reconcile",
]
