from skillsync.backend.base import Backend
from skillsync.core.actions import ActionFacade
from skillsync.core.conflict import ConflictResolver
from skillsync.core.models import Tool
from skillsync.core.reorder import ReorderCoordinator, SkillList
from skillsync.core.sync_engine import SyncEngine
from skillsync.frontend.base import Frontend, SilentFrontend
from skillsync.utils.config import Config


class SharedContext:
    """Global shared state for the application."""

    config: Config
    backend: Backend
    frontend: Frontend
    skills: SkillList
    resolver: ConflictResolver
    engine: SyncEngine
    reorderer: ReorderCoordinator
    actions: ActionFacade

    def __init__(
        self,
        config: Config,
        frontend: Frontend | None = None,
        backend: Backend | None = None,
    ):
        self.config = config
        self.backend = backend or Backend.from_config(config)
        self.frontend = frontend or SilentFrontend()
        self.skills = SkillList()
        self.resolver = ConflictResolver(self.frontend)
        self.engine = SyncEngine(
            self.backend,
            self.resolver,
            tools=[
                Tool(id=t.id, label=t.label, skills_path=str(t.skills_path))
                for t in config.tools
            ],
        )
        self.reorderer = ReorderCoordinator(self.skills, self.backend, self.frontend)
        self.actions = ActionFacade(
            self.skills, self.backend, self.frontend, self.engine, self.reorderer
        )
