"""
Method orchestration and result export.
"""

from .orchestrator import (
    MethodState,
    MethodTimeout,
    MethodResult,
    run_method,
    count_nuclei,
)
from .export import build_export, write_export, summarize_counts

__all__ = [
    "MethodState", "MethodTimeout", "MethodResult", "run_method", "count_nuclei",
    "build_export", "write_export", "summarize_counts",
]
