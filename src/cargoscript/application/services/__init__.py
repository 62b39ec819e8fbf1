"""Application services shared by user interfaces."""

from .cache_service import CacheMaintenanceService
from .run_service import PreparedScript, ScriptRunRequest, ScriptRunResult, ScriptRunService

__all__ = [
    "CacheMaintenanceService",
    "PreparedScript",
    "ScriptRunRequest",
    "ScriptRunResult",
    "ScriptRunService",
]
