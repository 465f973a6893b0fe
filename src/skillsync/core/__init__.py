"""Skill synchronization core."""

from .errors import (
    BackendError,
    BackendFailure,
    SkillExists,
    SkillNotFoundError,
    SkillSyncError,
    TargetExists,
    ToolNotInstalled,
    TransportError,
    decode_backend_error,
)
from .models import ConflictChoice, ConflictOutcome, Skill, SyncTarget, Tool
from .conflict import ConflictResolver, ConflictSession, SessionState
from .sync_engine import BatchResult, ConflictPolicy, SyncEngine, SyncStatus, ToolSyncResult
from .reorder import ReorderCoordinator, SkillList, move_item
from .actions import ActionFacade

__all__ = [
    "ActionFacade",
    "BackendError",
    "BackendFailure",
    "BatchResult",
    "ConflictChoice",
    "ConflictOutcome",
    "ConflictPolicy",
    "ConflictResolver",
    "ConflictSession",
    "ReorderCoordinator",
    "SessionState",
    "Skill",
    "SkillExists",
    "SkillList",
    "SkillNotFoundError",
    "SkillSyncError",
    "SyncEngine",
    "SyncStatus",
    "SyncTarget",
    "TargetExists",
    "Tool",
    "ToolNotInstalled",
    "ToolSyncResult",
    "TransportError",
    "decode_backend_error",
    "move_item",
]
