"""Filesystem backend: central skill store plus per-tool materialization."""

import json
import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Literal

import yaml

from skillsync.backend.base import Backend
from skillsync.core.errors import (
    BackendFailure,
    SkillExists,
    TargetExists,
    ToolNotInstalled,
)
from skillsync.core.models import Skill, SyncTarget, Tool
from skillsync.utils.config import ToolConfig
from skillsync.utils.def_loader import SKILL_FILENAME, read_skill_metadata

if TYPE_CHECKING:
    from skillsync.utils.config import Config

logger = logging.getLogger(__name__)


def _occupied(path: Path) -> bool:
    return path.exists() or path.is_symlink()


def _remove_path(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)


class LocalBackend(Backend):
    """
    Skill storage on the local filesystem.

    Directory structure:
    <workspace>/
    ├── skills.jsonl             # One Skill per line, file order is display order
    ├── menu.json                # Menu snapshot written on refresh
    └── skills/
        └── <skill-id>/SKILL.md  # Central copies

    A skill is materialized at ``<tool.skills_path>/<skill-id>``, either as a
    full copy or as a symlink to the central directory.
    """

    @staticmethod
    def from_config(config: "Config") -> "LocalBackend":
        return LocalBackend(
            store_path=config.skills_path,
            index_path=config.index_path,
            menu_path=config.menu_path,
            tools=config.tools,
            sync_mode=config.sync_mode,
        )

    def __init__(
        self,
        store_path: Path,
        index_path: Path,
        menu_path: Path,
        tools: Iterable[ToolConfig],
        sync_mode: Literal["copy", "symlink"] = "copy",
    ):
        self.store_path = Path(store_path)
        self.index_path = Path(index_path)
        self.menu_path = Path(menu_path)
        self.tools = {tool.id: tool for tool in tools}
        self.sync_mode = sync_mode

        self.store_path.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Index
    # ------------------------------------------------------------------

    def _read_index(self) -> list[Skill]:
        """Read all skills from the index, in persisted order."""
        if not self.index_path.exists():
            return []

        skills = []
        try:
            with open(self.index_path, encoding="utf-8") as f:
                lines = f.readlines()
        except (OSError, UnicodeDecodeError) as e:
            raise BackendFailure(f"Failed to read skill index: {e}") from e

        for line in lines:
            line = line.strip()
            if line:
                try:
                    skills.append(Skill.model_validate_json(line))
                except ValueError as e:
                    logger.warning(f"Skipping malformed index entry: {e}")
                    continue

        for position, skill in enumerate(skills):
            skill.position = position
        return skills

    def _write_index(self, skills: list[Skill]) -> None:
        """Rewrite the whole index in the given order."""
        try:
            self.index_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.index_path, "w", encoding="utf-8") as f:
                for position, skill in enumerate(skills):
                    skill.position = position
                    f.write(skill.model_dump_json() + "\n")
        except OSError as e:
            raise BackendFailure(f"Failed to write skill index: {e}") from e

    @staticmethod
    def _find(skills: list[Skill], skill_id: str) -> Skill:
        for skill in skills:
            if skill.id == skill_id:
                return skill
        raise BackendFailure(f"Skill not found: {skill_id}")

    def _tool(self, tool_id: str) -> ToolConfig:
        tool = self.tools.get(tool_id)
        if tool is None:
            raise BackendFailure(f"Unknown tool: {tool_id}")
        return tool

    def _is_own_materialization(
        self, skill: Skill, tool_id: str, dest: Path, central: Path
    ) -> bool:
        """Whether ``dest`` already holds this skill rather than unrelated content."""
        if dest.is_symlink():
            return dest.resolve() == central.resolve()
        target = skill.target_for(tool_id)
        return target is not None and Path(target.target_path) == dest

    def _place(self, central: Path, dest: Path) -> None:
        """Copy or link ``central`` to ``dest``, replacing whatever is there."""
        dest.parent.mkdir(parents=True, exist_ok=True)
        _remove_path(dest)
        if self.sync_mode == "symlink":
            try:
                dest.symlink_to(central.resolve(), target_is_directory=True)
                return
            except OSError as e:
                logger.warning(f"Symlink failed for {dest}, copying instead: {e}")
        shutil.copytree(central, dest)

    # ------------------------------------------------------------------
    # Sync operations
    # ------------------------------------------------------------------

    async def materialize(
        self,
        central_path: str,
        skill_id: str,
        tool_id: str,
        skill_name: str,
        overwrite: bool = False,
    ) -> SyncTarget:
        tool = self._tool(tool_id)
        if not tool.skills_path.parent.exists():
            raise ToolNotInstalled(tool_id, str(tool.skills_path))

        skills = self._read_index()
        skill = self._find(skills, skill_id)
        central = Path(central_path)
        if not central.is_dir():
            raise BackendFailure(f"Central copy of '{skill_name}' is missing: {central}")

        dest = tool.skills_path / skill_id
        if (
            _occupied(dest)
            and not overwrite
            and not self._is_own_materialization(skill, tool_id, dest, central)
        ):
            raise TargetExists(str(dest))

        try:
            self._place(central, dest)
        except OSError as e:
            raise BackendFailure(
                f"Failed to sync '{skill_name}' to {tool.label}: {e}"
            ) from e

        target = SyncTarget(tool_id=tool_id, target_path=str(dest))
        skill.set_target(target)
        self._write_index(skills)
        return target

    async def dematerialize(self, skill_id: str, tool_id: str) -> None:
        self._tool(tool_id)
        skills = self._read_index()
        skill = self._find(skills, skill_id)

        target = skill.target_for(tool_id)
        if target is None:
            return

        try:
            _remove_path(Path(target.target_path))
        except OSError as e:
            raise BackendFailure(f"Failed to remove {target.target_path}: {e}") from e

        skill.remove_target(tool_id)
        self._write_index(skills)

    async def persist_order(self, skill_ids: list[str]) -> None:
        skills = self._read_index()
        by_id = {skill.id: skill for skill in skills}
        if len(skill_ids) != len(by_id) or set(skill_ids) != set(by_id):
            raise BackendFailure("Skill order does not match stored skills")

        self._write_index([by_id[skill_id] for skill_id in skill_ids])

    async def refresh_external_menu(self) -> None:
        """Write the ordered menu snapshot read by the tray menu."""
        menu = [
            {"id": skill.id, "name": skill.name, "tools": skill.tool_ids}
            for skill in self._read_index()
        ]
        try:
            self.menu_path.write_text(json.dumps(menu, indent=2), encoding="utf-8")
        except OSError as e:
            raise BackendFailure(f"Failed to write menu: {e}") from e

    # ------------------------------------------------------------------
    # Skill management
    # ------------------------------------------------------------------

    async def list_skills(self) -> list[Skill]:
        return self._read_index()

    async def list_tools(self) -> list[Tool]:
        return [
            Tool(id=tool.id, label=tool.label, skills_path=str(tool.skills_path))
            for tool in self.tools.values()
        ]

    def _read_metadata(self, skill_dir: Path) -> tuple[str, str]:
        try:
            return read_skill_metadata(skill_dir)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise BackendFailure(f"Invalid {SKILL_FILENAME} in {skill_dir}: {e}") from e

    async def add_skill(self, source_path: Path, overwrite: bool = False) -> Skill:
        source = Path(source_path).expanduser()
        if not (source / SKILL_FILENAME).is_file():
            raise BackendFailure(f"No {SKILL_FILENAME} found in {source}")

        name, description = self._read_metadata(source)
        skill_id = source.name
        central = self.store_path / skill_id

        skills = self._read_index()
        existing = next((s for s in skills if s.id == skill_id), None)
        if (existing is not None or central.exists()) and not overwrite:
            raise SkillExists(name)

        try:
            _remove_path(central)
            shutil.copytree(source, central)
        except OSError as e:
            raise BackendFailure(f"Failed to copy {source}: {e}") from e

        if existing is None:
            skill = Skill(
                id=skill_id,
                name=name,
                description=description,
                central_path=str(central),
                source_path=str(source.resolve()),
            )
            skills.append(skill)
        else:
            skill = existing
            skill.name = name
            skill.description = description
            skill.source_path = str(source.resolve())

        self._write_index(skills)
        logger.info(f"Stored skill '{name}' at {central}")
        return skill

    async def update_skill(self, skill_id: str) -> Skill:
        skills = self._read_index()
        skill = self._find(skills, skill_id)
        central = Path(skill.central_path)

        try:
            if skill.source_path:
                source = Path(skill.source_path)
                if not (source / SKILL_FILENAME).is_file():
                    raise BackendFailure(f"Source of '{skill.name}' is missing: {source}")
                if source.resolve() != central.resolve():
                    _remove_path(central)
                    shutil.copytree(source, central)

            # Symlinked targets follow the central copy on their own
            for target in skill.targets:
                dest = Path(target.target_path)
                if not dest.is_symlink():
                    _remove_path(dest)
                    shutil.copytree(central, dest)
        except OSError as e:
            raise BackendFailure(f"Failed to update '{skill.name}': {e}") from e

        skill.name, skill.description = self._read_metadata(central)
        self._write_index(skills)
        return skill

    async def delete_skill(self, skill_id: str) -> None:
        skills = self._read_index()
        skill = self._find(skills, skill_id)

        try:
            for target in skill.targets:
                _remove_path(Path(target.target_path))
            _remove_path(Path(skill.central_path))
        except OSError as e:
            raise BackendFailure(f"Failed to delete '{skill.name}': {e}") from e

        self._write_index([s for s in skills if s.id != skill_id])
