"""User-facing skill actions with busy tracking and error reporting."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, AsyncIterator, Iterable

from skillsync.core.errors import (
    BackendError,
    SkillExists,
    SkillNotFoundError,
    ToolNotInstalled,
)
from skillsync.core.models import Skill
from skillsync.core.reorder import ReorderCoordinator, SkillList
from skillsync.core.sync_engine import (
    BatchResult,
    ConflictPolicy,
    SyncEngine,
    SyncStatus,
    ToolSyncResult,
)

if TYPE_CHECKING:
    from skillsync.backend.base import Backend
    from skillsync.frontend.base import Frontend

logger = logging.getLogger(__name__)


class ActionFacade:
    """
    Entry point for every user-initiated skill action.

    Each action sets ``busy``, delegates to the sync engine or the reorder
    coordinator, refreshes the external menu on success, reports failures
    through the frontend, and clears ``busy`` however it ends. ``busy`` is a
    soft guard for rendering layers, not a lock.

    Deletion is two-phase: ``request_delete`` only records the target,
    ``confirm_delete`` performs it, and ``cancel_delete`` never contacts the
    backend.
    """

    def __init__(
        self,
        skills: SkillList,
        backend: "Backend",
        frontend: "Frontend",
        engine: SyncEngine,
        reorderer: ReorderCoordinator,
    ):
        self.skills = skills
        self.backend = backend
        self.frontend = frontend
        self.engine = engine
        self.reorderer = reorderer
        self.pending_delete_id: str | None = None
        self._busy_flag = False

    @property
    def busy(self) -> bool:
        return self._busy_flag

    @property
    def skill_to_delete(self) -> Skill | None:
        if self.pending_delete_id is None:
            return None
        return self.skills.get(self.pending_delete_id)

    @asynccontextmanager
    async def _busy(self) -> AsyncIterator[None]:
        self._busy_flag = True
        try:
            yield
        finally:
            self._busy_flag = False

    def find_skill(self, ref: str) -> Skill:
        """
        Resolve a skill by id or name.

        Raises:
            SkillNotFoundError: If nothing matches
        """
        skill = self.skills.find(ref)
        if skill is None:
            raise SkillNotFoundError(ref)
        return skill

    async def report_error(self, error: BackendError) -> None:
        """Translate a backend error into a user-visible message."""
        if isinstance(error, ToolNotInstalled):
            await self.frontend.show_tool_not_installed(
                self.engine.tool_label(error.tool_key), error.skills_path
            )
        else:
            await self.frontend.show_error(str(error))

    async def load(self) -> bool:
        """Load the skill list from the backend."""
        async with self._busy():
            try:
                self.skills.replace(await self.backend.list_skills())
            except BackendError as e:
                logger.error(f"Failed to load skills: {e}")
                await self.report_error(e)
                return False
            return True

    async def toggle_tool(self, skill: Skill, tool_id: str) -> ToolSyncResult | None:
        """
        Sync or unsync one skill at one tool.

        Returns:
            The result, or None if the operation failed and was reported
        """
        async with self._busy():
            try:
                result = await self.engine.toggle(skill, tool_id)
            except BackendError as e:
                logger.error(f"Failed to toggle '{skill.name}' at {tool_id}: {e}")
                await self.report_error(e)
                return None

            if result.status is not SyncStatus.SKIPPED:
                await self.backend.try_refresh_external_menu()
            return result

    async def sync_to_tools(
        self,
        skill: Skill,
        tool_ids: Iterable[str],
        policy: ConflictPolicy = ConflictPolicy.CONFIRM,
    ) -> BatchResult:
        """Sync one skill to several tools. Never raises for backend errors."""
        async with self._busy():
            batch = await self.engine.sync_batch(skill, tool_ids, policy)
            if batch.synced:
                await self.backend.try_refresh_external_menu()
            return batch

    async def update(self, skill: Skill) -> bool:
        """Refresh a skill from its source."""
        async with self._busy():
            try:
                updated = await self.backend.update_skill(skill.id)
            except BackendError as e:
                logger.error(f"Failed to update '{skill.name}': {e}")
                await self.report_error(e)
                return False

            self.skills.upsert(updated)
            await self.backend.try_refresh_external_menu()
            return True

    def request_delete(self, skill_id: str) -> None:
        self.pending_delete_id = skill_id

    def cancel_delete(self) -> None:
        self.pending_delete_id = None

    async def confirm_delete(self) -> bool:
        """Delete the skill recorded by ``request_delete``."""
        async with self._busy():
            skill_id = self.pending_delete_id
            if skill_id is None:
                return False

            try:
                await self.backend.delete_skill(skill_id)
            except BackendError as e:
                logger.error(f"Failed to delete skill {skill_id}: {e}")
                await self.report_error(e)
                return False

            self.skills.remove(skill_id)
            self.pending_delete_id = None
            await self.backend.try_refresh_external_menu()
            return True

    async def reorder(self, from_index: int, to_index: int) -> bool:
        async with self._busy():
            return await self.reorderer.reorder(from_index, to_index)

    async def reorder_by_id(self, active_id: str, over_id: str) -> bool:
        async with self._busy():
            return await self.reorderer.reorder_by_id(active_id, over_id)

    async def add(self, source_path: Path, tool_ids: Iterable[str] = ()) -> Skill | None:
        """
        Add a skill from a directory and sync it to the chosen tools.

        An existing skill is only replaced after the user confirms. Occupied
        tool targets are confirmed one by one.

        Returns:
            The added skill, or None if it was declined or failed
        """
        async with self._busy():
            try:
                skill = await self._add_confirming_overwrite(source_path)
            except BackendError as e:
                logger.error(f"Failed to add skill from {source_path}: {e}")
                await self.report_error(e)
                return None
            if skill is None:
                return None

            self.skills.upsert(skill)
            await self.engine.sync_batch(skill, tool_ids, ConflictPolicy.CONFIRM)
            await self.backend.try_refresh_external_menu()
            return skill

    async def _add_confirming_overwrite(self, source_path: Path) -> Skill | None:
        try:
            return await self.backend.add_skill(source_path)
        except SkillExists as e:
            existing_name = e.name

        if not await self.frontend.confirm_skill_overwrite(existing_name):
            logger.info(f"Kept existing skill '{existing_name}'")
            await self.frontend.show_message(f"Kept existing skill '{existing_name}'")
            return None
        return await self.backend.add_skill(source_path, overwrite=True)

    async def import_directory(
        self, directory: Path, tool_ids: Iterable[str] = ()
    ) -> list[Skill]:
        """
        Import every skill directory under ``directory``.

        Skills that already exist are left alone, and occupied tool targets
        are skipped without prompting.

        Returns:
            The newly imported skills
        """
        tool_ids = list(tool_ids)
        if not directory.is_dir():
            await self.frontend.show_error(f"Not a directory: {directory}")
            return []

        candidates = sorted(
            d for d in directory.iterdir() if d.is_dir() and (d / "SKILL.md").exists()
        )

        imported: list[Skill] = []
        async with self._busy():
            for candidate in candidates:
                try:
                    skill = await self.backend.add_skill(candidate)
                except SkillExists:
                    logger.info(f"Skipping {candidate.name}: skill already exists")
                    continue
                except BackendError as e:
                    logger.error(f"Failed to import {candidate}: {e}")
                    continue

                self.skills.upsert(skill)
                await self.engine.sync_batch(skill, tool_ids, ConflictPolicy.SKIP)
                imported.append(skill)

            if imported:
                await self.backend.try_refresh_external_menu()

        skipped = len(candidates) - len(imported)
        summary = f"Imported {len(imported)} skill(s)"
        if skipped:
            summary += f", skipped {skipped}"
        await self.frontend.show_message(summary)
        return imported
