"""Shared test fixtures for skillsync test suite."""

from pathlib import Path
from typing import Callable

import pytest

from skillsync.backend.base import Backend
from skillsync.core.actions import ActionFacade
from skillsync.core.conflict import ConflictResolver
from skillsync.core.errors import BackendError, SkillExists, TargetExists
from skillsync.core.models import ConflictChoice, Skill, SyncTarget, Tool
from skillsync.core.reorder import ReorderCoordinator, SkillList
from skillsync.core.sync_engine import SyncEngine
from skillsync.frontend.base import Frontend
from skillsync.utils.config import Config, ToolConfig


class FakeBackend(Backend):
    """In-memory backend that records every call."""

    def __init__(self, skills: list[Skill] | None = None, tools: list[Tool] | None = None):
        self.skills = list(skills or [])
        self.tools = list(tools or [])
        self.calls: list[tuple] = []
        # (skill_id, tool_id) -> existing path; only raised for non-overwrite calls
        self.occupied: dict[tuple[str, str], str] = {}
        # tool_id -> error raised for every call
        self.failures: dict[str, BackendError] = {}
        self.persist_error: BackendError | None = None
        self.refresh_error: BackendError | None = None
        self.update_error: BackendError | None = None
        self.delete_error: BackendError | None = None
        self.refresh_count = 0

    def occupy(self, skill_id: str, tool_id: str) -> str:
        """Mark the destination of one skill at one tool as already taken."""
        path = f"/tools/{tool_id}/{skill_id}"
        self.occupied[(skill_id, tool_id)] = path
        return path

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]

    async def materialize(self, central_path, skill_id, tool_id, skill_name, overwrite=False):
        self.calls.append(("materialize", tool_id, overwrite))
        if tool_id in self.failures:
            raise self.failures[tool_id]
        if (skill_id, tool_id) in self.occupied and not overwrite:
            raise TargetExists(self.occupied[(skill_id, tool_id)])
        return SyncTarget(tool_id=tool_id, target_path=f"/tools/{tool_id}/{skill_id}")

    async def dematerialize(self, skill_id, tool_id):
        self.calls.append(("dematerialize", tool_id))

    async def persist_order(self, skill_ids):
        self.calls.append(("persist_order", list(skill_ids)))
        if self.persist_error is not None:
            raise self.persist_error

    async def refresh_external_menu(self):
        self.calls.append(("refresh_external_menu",))
        if self.refresh_error is not None:
            raise self.refresh_error
        self.refresh_count += 1

    async def list_skills(self):
        self.calls.append(("list_skills",))
        return list(self.skills)

    async def list_tools(self):
        return list(self.tools)

    async def add_skill(self, source_path, overwrite=False):
        self.calls.append(("add_skill", Path(source_path).name, overwrite))
        skill_id = Path(source_path).name
        existing = next((s for s in self.skills if s.id == skill_id), None)
        if existing is not None and not overwrite:
            raise SkillExists(existing.name)
        skill = Skill(id=skill_id, name=skill_id, central_path=f"/central/{skill_id}")
        if existing is None:
            self.skills.append(skill)
        return skill

    async def update_skill(self, skill_id):
        self.calls.append(("update_skill", skill_id))
        if self.update_error is not None:
            raise self.update_error
        skill = next(s for s in self.skills if s.id == skill_id)
        return skill.model_copy(update={"description": "updated"})

    async def delete_skill(self, skill_id):
        self.calls.append(("delete_skill", skill_id))
        if self.delete_error is not None:
            raise self.delete_error
        self.skills = [s for s in self.skills if s.id != skill_id]


class ScriptedFrontend(Frontend):
    """Frontend that replays scripted answers and records what it was asked."""

    def __init__(self):
        self.answers: list[ConflictChoice | None] = []
        self.confirm_overwrite = False
        self.conflict_prompts: list[tuple[str, str, str, bool]] = []
        self.overwrite_prompts: list[str] = []
        self.messages: list[str] = []
        self.errors: list[str] = []
        self.not_installed: list[tuple[str, str]] = []

    async def ask_conflict(self, skill_name, tool_label, target_path, has_more_pending):
        self.conflict_prompts.append((skill_name, tool_label, target_path, has_more_pending))
        return self.answers.pop(0) if self.answers else ConflictChoice.SKIP

    async def confirm_skill_overwrite(self, skill_name):
        self.overwrite_prompts.append(skill_name)
        return self.confirm_overwrite

    async def show_message(self, content):
        self.messages.append(content)

    async def show_error(self, content):
        self.errors.append(content)

    async def show_tool_not_installed(self, tool_label, skills_path):
        self.not_installed.append((tool_label, skills_path))


@pytest.fixture
def anyio_backend() -> str:
    """The code under test is asyncio-based; run anyio tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def tools() -> list[Tool]:
    """Three known tools: A, B and C."""
    return [
        Tool(id="a", label="Tool A", skills_path="/tools/a"),
        Tool(id="b", label="Tool B", skills_path="/tools/b"),
        Tool(id="c", label="Tool C", skills_path="/tools/c"),
    ]


@pytest.fixture
def make_skill() -> Callable[..., Skill]:
    """Factory for skills with sensible defaults."""

    def _make(skill_id: str = "review", name: str | None = None, targets=()) -> Skill:
        return Skill(
            id=skill_id,
            name=name or skill_id.title(),
            central_path=f"/central/{skill_id}",
            targets=[SyncTarget(tool_id=t, target_path=f"/tools/{t}/{skill_id}") for t in targets],
        )

    return _make


@pytest.fixture
def backend(tools: list[Tool]) -> FakeBackend:
    return FakeBackend(tools=tools)


@pytest.fixture
def frontend() -> ScriptedFrontend:
    return ScriptedFrontend()


@pytest.fixture
def resolver(frontend: ScriptedFrontend) -> ConflictResolver:
    return ConflictResolver(frontend)


@pytest.fixture
def engine(backend: FakeBackend, resolver: ConflictResolver, tools: list[Tool]) -> SyncEngine:
    return SyncEngine(backend, resolver, tools=tools)


@pytest.fixture
def skill_list() -> SkillList:
    return SkillList()


@pytest.fixture
def reorderer(
    skill_list: SkillList, backend: FakeBackend, frontend: ScriptedFrontend
) -> ReorderCoordinator:
    return ReorderCoordinator(skill_list, backend, frontend)


@pytest.fixture
def actions(
    skill_list: SkillList,
    backend: FakeBackend,
    frontend: ScriptedFrontend,
    engine: SyncEngine,
    reorderer: ReorderCoordinator,
) -> ActionFacade:
    return ActionFacade(skill_list, backend, frontend, engine, reorderer)


@pytest.fixture
def tool_home(tmp_path: Path) -> Path:
    """Fake home directory with two installed tools and one missing."""
    home = tmp_path / "home"
    (home / ".alpha").mkdir(parents=True)
    (home / ".beta").mkdir(parents=True)
    return home


@pytest.fixture
def test_config(tmp_path: Path, tool_home: Path) -> Config:
    """Config with workspace pointing to tmp_path and tools under tool_home."""
    return Config(
        workspace=tmp_path / "workspace",
        tools=[
            ToolConfig(id="alpha", label="Alpha", skills_path=tool_home / ".alpha" / "skills"),
            ToolConfig(id="beta", label="Beta", skills_path=tool_home / ".beta" / "skills"),
            ToolConfig(id="gamma", label="Gamma", skills_path=tool_home / ".gamma" / "skills"),
        ],
    )


@pytest.fixture
def make_source(tmp_path: Path) -> Callable[..., Path]:
    """Factory that writes a skill source directory with a SKILL.md."""

    def _make(skill_id: str, name: str | None = None, description: str = "A skill") -> Path:
        source = tmp_path / "sources" / skill_id
        source.mkdir(parents=True, exist_ok=True)
        (source / "SKILL.md").write_text(
            f"---\nname: {name or skill_id}\ndescription: {description}\n---\n\n# {skill_id}\n"
        )
        return source

    return _make
