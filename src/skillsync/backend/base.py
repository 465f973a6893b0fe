"""Backend interface for skill storage and materialization."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from skillsync.core.errors import BackendError
from skillsync.core.models import Skill, SyncTarget, Tool

if TYPE_CHECKING:
    from skillsync.utils.config import Config

logger = logging.getLogger(__name__)


class Backend(ABC):
    """
    Abstract interface to the process that owns skill storage.

    Every method is a suspension point and raises a BackendError subclass
    on failure (TargetExists, SkillExists, ToolNotInstalled, BackendFailure).
    Each (skill, tool) operation is committed independently.
    """

    @staticmethod
    def from_config(config: "Config") -> "Backend":
        """Create the backend selected by ``config.backend.kind``."""
        if config.backend.kind == "command":
            from skillsync.backend.invoke import InvokeBackend, SubprocessTransport

            return InvokeBackend(SubprocessTransport(config.backend.command))

        from skillsync.backend.local import LocalBackend

        return LocalBackend.from_config(config)

    @abstractmethod
    async def materialize(
        self,
        central_path: str,
        skill_id: str,
        tool_id: str,
        skill_name: str,
        overwrite: bool = False,
    ) -> SyncTarget:
        """
        Write or link a skill into a tool's directory.

        Raises:
            TargetExists: If the destination is occupied and overwrite is False
            ToolNotInstalled: If the tool is not present on this machine
        """

    @abstractmethod
    async def dematerialize(self, skill_id: str, tool_id: str) -> None:
        """Remove a skill's materialized copy from a tool."""

    @abstractmethod
    async def persist_order(self, skill_ids: list[str]) -> None:
        """Persist the full skill ordering."""

    @abstractmethod
    async def refresh_external_menu(self) -> None:
        """Notify external surfaces (tray menu) that skills changed."""

    async def try_refresh_external_menu(self) -> bool:
        """Best-effort refresh. Failures are logged, never raised."""
        try:
            await self.refresh_external_menu()
            return True
        except BackendError as e:
            logger.warning(f"Failed to refresh external menu: {e}")
            return False

    @abstractmethod
    async def list_skills(self) -> list[Skill]:
        """List stored skills in persisted order."""

    @abstractmethod
    async def list_tools(self) -> list[Tool]:
        """List known tools."""

    @abstractmethod
    async def add_skill(self, source_path: Path, overwrite: bool = False) -> Skill:
        """
        Import a skill directory into central storage.

        Raises:
            SkillExists: If the skill is already stored and overwrite is False
        """

    @abstractmethod
    async def update_skill(self, skill_id: str) -> Skill:
        """Refresh a skill from its source and re-sync copied targets."""

    @abstractmethod
    async def delete_skill(self, skill_id: str) -> None:
        """Delete a skill and detach all of its targets."""
