from .renderer import render
from .compare import monitor_differences, monitors_equal
from .reader import ProvisionedStateReader
from .sync import SyncAction, SyncOutcome, SyncResult, SyncEngine

__all__ = [
    "render",
    "monitor_differences",
    "monitors_equal",
    "ProvisionedStateReader",
    "SyncAction",
    "SyncOutcome",
    "SyncResult",
    "SyncEngine",
]
