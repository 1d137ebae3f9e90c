"""Services layer."""

from .sync import SyncOptions, SyncPlan, SyncReport, SyncService, SyncState

__all__ = [
    "SyncOptions",
    "SyncPlan",
    "SyncReport",
    "SyncService",
    "SyncState",
]
