from .maintenance import PruneResult, RefreshResult, prune_without_priority, refresh_roles
from .pool import run_bounded
from .runner import JobRunner

__all__ = [
    "JobRunner",
    "PruneResult",
    "RefreshResult",
    "prune_without_priority",
    "refresh_roles",
    "run_bounded",
]
