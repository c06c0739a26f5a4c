"""
Backup engine.

Components, leaves first:
- CursorSource: pages over the source query
- RunStats: counters of the active run
- DocumentPipeline: per-document backup / verify / clean stages
- PageScheduler: single or multi dispatch of each page
- ContainerBackupJob: run orchestration and summary reporting
"""

from .cursor import CursorSource, Page
from .stats import RunStats
from .pipeline import DocumentPipeline
from .scheduler import PageScheduler, SchedulerState
from .controller import ContainerBackupJob

__all__ = [
    "CursorSource",
    "Page",
    "RunStats",
    "DocumentPipeline",
    "PageScheduler",
    "SchedulerState",
    "ContainerBackupJob",
]
