"""Propagates skills to tool directories and resolves occupied targets."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from skillsync.core.errors import BackendError, TargetExists
from skillsync.core.models import ConflictOutcome, Skill, SyncTarget, Tool

if TYPE_CHECKING:
    from skillsync.backend.base import Backend
    from skillsync.core.conflict import ConflictResolver, ConflictSession

logger = logging.getLogger(__name__)


class ConflictPolicy(str, Enum):
    """How a batch handles occupied targets."""

    CONFIRM = "confirm"  # ask the user per target
    SKIP = "skip"  # leave occupied targets alone, no prompt


class SyncStatus(str, Enum):
    SYNCED = "synced"
    OVERWRITTEN = "overwritten"
    UNSYNCED = "unsynced"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class ToolSyncResult:
    """Outcome of one (skill, tool) operation."""

    tool_id: str
    status: SyncStatus
    target_path: str | None = None
    error: BackendError | None = None


@dataclass
class BatchResult:
    """Per-tool results of a batch, in the order the tools were processed."""

    skill_id: str
    results: dict[str, ToolSyncResult] = field(default_factory=dict)

    def _with_status(self, *statuses: SyncStatus) -> list[str]:
        return [r.tool_id for r in self.results.values() if r.status in statuses]

    @property
    def synced(self) -> list[str]:
        return self._with_status(SyncStatus.SYNCED, SyncStatus.OVERWRITTEN)

    @property
    def skipped(self) -> list[str]:
        return self._with_status(SyncStatus.SKIPPED)

    @property
    def failed(self) -> list[str]:
        return self._with_status(SyncStatus.FAILED)


class SyncEngine:
    """
    Makes a skill's materialized state at one or more tools match the
    desired state.

    The engine is the only writer of ``Skill.targets``. Batches run strictly
    sequentially in the given tool order: each tool, including any conflict
    prompt, is fully resolved before the next request is issued.
    """

    def __init__(
        self,
        backend: "Backend",
        resolver: "ConflictResolver",
        tools: Iterable[Tool] = (),
    ):
        self.backend = backend
        self.resolver = resolver
        self.tools = {tool.id: tool for tool in tools}

    def tool_label(self, tool_id: str) -> str:
        tool = self.tools.get(tool_id)
        return tool.label if tool else tool_id

    async def sync_one(
        self, skill: Skill, tool_id: str, overwrite: bool = False
    ) -> SyncTarget:
        """
        Materialize a skill at one tool.

        Args:
            skill: Skill to sync
            tool_id: Tool to sync to
            overwrite: Replace existing content at the destination

        Returns:
            The recorded SyncTarget

        Raises:
            TargetExists: If the destination is occupied and overwrite is False
            BackendError: Any other backend failure, unchanged
        """
        target = await self.backend.materialize(
            skill.central_path, skill.id, tool_id, skill.name, overwrite=overwrite
        )
        skill.set_target(target)
        logger.info(f"Synced '{skill.name}' to {tool_id}: {target.target_path}")
        return target

    async def unsync_one(self, skill: Skill, tool_id: str) -> None:
        """Remove a skill from one tool. A missing target is not an error."""
        if not skill.is_synced_to(tool_id):
            logger.debug(f"'{skill.name}' is not synced to {tool_id}, nothing to remove")
            return

        await self.backend.dematerialize(skill.id, tool_id)
        skill.remove_target(tool_id)
        logger.info(f"Unsynced '{skill.name}' from {tool_id}")

    async def toggle(self, skill: Skill, tool_id: str) -> ToolSyncResult:
        """
        Flip whether a skill is synced to a tool.

        An occupied destination is put to the user; declining leaves the
        state unchanged and is reported as SKIPPED, not as an error.

        Raises:
            BackendError: Any non-conflict failure, or a failed overwrite
        """
        if skill.is_synced_to(tool_id):
            await self.unsync_one(skill, tool_id)
            return ToolSyncResult(tool_id, SyncStatus.UNSYNCED)

        try:
            target = await self.sync_one(skill, tool_id)
            return ToolSyncResult(tool_id, SyncStatus.SYNCED, target.target_path)
        except TargetExists as e:
            outcome = await self.resolver.resolve_single(
                skill.name, self.tool_label(tool_id), e.path
            )

        if outcome is not ConflictOutcome.PROCEED_OVERWRITE:
            logger.info(f"Kept existing target for '{skill.name}' at {tool_id}")
            return ToolSyncResult(tool_id, SyncStatus.SKIPPED)

        target = await self.sync_one(skill, tool_id, overwrite=True)
        return ToolSyncResult(tool_id, SyncStatus.OVERWRITTEN, target.target_path)

    async def sync_batch(
        self,
        skill: Skill,
        tool_ids: Iterable[str],
        conflict_policy: ConflictPolicy = ConflictPolicy.CONFIRM,
    ) -> BatchResult:
        """
        Sync a skill to several tools in order.

        Never raises for backend failures: each tool's error is logged and
        recorded, and the remaining tools are still processed.

        Args:
            skill: Skill to sync
            tool_ids: Tools in processing order (duplicates are ignored)
            conflict_policy: CONFIRM to prompt per occupied target, SKIP to
                leave occupied targets alone silently

        Returns:
            BatchResult mapping each tool to its outcome
        """
        ordered = list(dict.fromkeys(tool_ids))
        batch = BatchResult(skill_id=skill.id)
        session = self.resolver.open_session(skill.name)

        try:
            for i, tool_id in enumerate(ordered):
                has_more = i < len(ordered) - 1
                batch.results[tool_id] = await self._sync_in_batch(
                    skill, tool_id, conflict_policy, session, has_more
                )
        finally:
            session.close()

        logger.info(
            f"Batch sync of '{skill.name}': synced={batch.synced} "
            f"skipped={batch.skipped} failed={batch.failed}"
        )
        return batch

    async def _sync_in_batch(
        self,
        skill: Skill,
        tool_id: str,
        policy: ConflictPolicy,
        session: "ConflictSession",
        has_more: bool,
    ) -> ToolSyncResult:
        try:
            target = await self.sync_one(skill, tool_id)
            return ToolSyncResult(tool_id, SyncStatus.SYNCED, target.target_path)
        except TargetExists as e:
            existing_path = e.path
        except BackendError as e:
            logger.error(f"Failed to sync '{skill.name}' to {tool_id}: {e}")
            return ToolSyncResult(tool_id, SyncStatus.FAILED, error=e)

        if policy is ConflictPolicy.SKIP:
            logger.info(f"Skipping {tool_id}: target exists at {existing_path}")
            return ToolSyncResult(tool_id, SyncStatus.SKIPPED, existing_path)

        outcome = await session.resolve(
            self.tool_label(tool_id), existing_path, has_more_pending=has_more
        )
        if outcome is not ConflictOutcome.PROCEED_OVERWRITE:
            return ToolSyncResult(tool_id, SyncStatus.SKIPPED, existing_path)

        try:
            target = await self.sync_one(skill, tool_id, overwrite=True)
            return ToolSyncResult(tool_id, SyncStatus.OVERWRITTEN, target.target_path)
        except BackendError as e:
            logger.error(f"Failed to overwrite sync of '{skill.name}' to {tool_id}: {e}")
            return ToolSyncResult(tool_id, SyncStatus.FAILED, error=e)
