"""Skill, target and tool models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SyncTarget(BaseModel):
    """Evidence that a skill is materialized in a tool's directory."""

    model_config = ConfigDict(extra="forbid")

    tool_id: str
    target_path: str


class Tool(BaseModel):
    """An external integration that reads skills from its own directory."""

    model_config = ConfigDict(extra="forbid")

    id: str
    label: str
    skills_path: str = ""


class Skill(BaseModel):
    """A centrally stored skill definition and where it is synced to."""

    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    central_path: str
    description: str = ""
    source_path: str | None = None
    targets: list[SyncTarget] = Field(default_factory=list)
    position: int = 0

    def target_for(self, tool_id: str) -> SyncTarget | None:
        """Get the target for a tool, if the skill is synced there."""
        for target in self.targets:
            if target.tool_id == tool_id:
                return target
        return None

    def is_synced_to(self, tool_id: str) -> bool:
        return self.target_for(tool_id) is not None

    def set_target(self, target: SyncTarget) -> None:
        """Add a target, replacing any existing entry for the same tool."""
        self.remove_target(target.tool_id)
        self.targets.append(target)

    def remove_target(self, tool_id: str) -> bool:
        """Remove the target for a tool. Returns True if one was removed."""
        before = len(self.targets)
        self.targets = [t for t in self.targets if t.tool_id != tool_id]
        return len(self.targets) != before

    @property
    def tool_ids(self) -> list[str]:
        return [t.tool_id for t in self.targets]


class ConflictChoice(str, Enum):
    """User answer to an occupied-target prompt."""

    OVERWRITE = "overwrite"
    OVERWRITE_ALL = "overwriteAll"
    SKIP = "skip"


class ConflictOutcome(str, Enum):
    """Decision applied to one conflicting target."""

    PROCEED_OVERWRITE = "proceed_overwrite"
    SKIP = "skip"
    ABORT = "abort"
