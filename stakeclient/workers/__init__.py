"""
Background Workers

Workers for scheduled and background tasks.
"""

from .reachability_worker import (
    ReachabilityWorker,
    WorkerConfig,
    get_reachability_worker,
    run_reachability_loop,
    set_reachability_worker,
)

__all__ = [
    "ReachabilityWorker",
    "WorkerConfig",
    "get_reachability_worker",
    "run_reachability_loop",
    "set_reachability_worker",
]
