"""Configuration management for skillsync."""

from pathlib import Path
from typing import Annotated, Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


# ============================================================================
# Configuration Models
# ============================================================================


class ToolConfig(BaseModel):
    """A tool that reads skills from its own directory."""

    id: str
    label: str
    skills_path: Path

    @field_validator("skills_path")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return v.expanduser()


class LocalBackendConfig(BaseModel):
    """Filesystem backend living inside the workspace."""

    kind: Literal["local"] = "local"


class CommandBackendConfig(BaseModel):
    """External backend process invoked once per operation."""

    kind: Literal["command"] = "command"
    command: list[str]

    @field_validator("command")
    @classmethod
    def command_not_empty(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("command must not be empty")
        return v


def _default_tools() -> list[ToolConfig]:
    return [
        ToolConfig(id="claude_code", label="Claude Code", skills_path=Path("~/.claude/skills")),
        ToolConfig(id="codex", label="Codex", skills_path=Path("~/.codex/skills")),
        ToolConfig(
            id="opencode", label="OpenCode", skills_path=Path("~/.config/opencode/skill")
        ),
        ToolConfig(id="cursor", label="Cursor", skills_path=Path("~/.cursor/skills")),
        ToolConfig(id="gemini", label="Gemini CLI", skills_path=Path("~/.gemini/skills")),
    ]


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config(BaseModel):
    """
    Main configuration for skillsync.

    Configuration is loaded from the workspace (~/.skillsync/ by default):
    1. config.user.yaml - User configuration
    2. config.runtime.yaml - Runtime state (optional, overrides user)

    Runtime config takes precedence over user config. Pydantic defaults are used
    for optional fields not specified in config files.
    """

    workspace: Path
    skills_path: Path = Field(default=Path("skills"))
    logging_path: Path = Field(default=Path(".logs"))
    index_file: str = "skills.jsonl"
    menu_file: str = "menu.json"
    sync_mode: Literal["copy", "symlink"] = "copy"
    tools: list[ToolConfig] = Field(default_factory=_default_tools)
    backend: Annotated[
        LocalBackendConfig | CommandBackendConfig, Field(discriminator="kind")
    ] = Field(default_factory=LocalBackendConfig)

    @model_validator(mode="after")
    def resolve_paths(self) -> "Config":
        """Resolve relative paths to absolute using workspace."""
        for field_name in ("skills_path", "logging_path"):
            path = getattr(self, field_name)
            if path.is_absolute():
                raise ValueError(f"{field_name} must be relative, got: {path}")
            setattr(self, field_name, self.workspace / path)
        return self

    @model_validator(mode="after")
    def unique_tool_ids(self) -> "Config":
        seen: set[str] = set()
        for tool in self.tools:
            if tool.id in seen:
                raise ValueError(f"Duplicate tool id: {tool.id}")
            seen.add(tool.id)
        return self

    @property
    def index_path(self) -> Path:
        return self.workspace / self.index_file

    @property
    def menu_path(self) -> Path:
        return self.workspace / self.menu_file

    def get_tool(self, tool_id: str) -> ToolConfig | None:
        for tool in self.tools:
            if tool.id == tool_id:
                return tool
        return None

    @classmethod
    def load(cls, workspace_dir: Path) -> "Config":
        """
        Load configuration from a workspace directory.

        Missing config files are fine; defaults apply.

        Args:
            workspace_dir: Path to workspace directory

        Returns:
            Config instance with all settings loaded and validated

        Raises:
            ValidationError: If configuration is invalid
        """
        return cls.model_validate(cls._read_files(workspace_dir))

    @classmethod
    def _read_files(cls, workspace_dir: Path) -> dict[str, Any]:
        config_data: dict[str, Any] = {"workspace": workspace_dir}

        for filename in ("config.user.yaml", "config.runtime.yaml"):
            config_file = workspace_dir / filename
            if config_file.exists():
                with open(config_file) as f:
                    file_data = yaml.safe_load(f) or {}
                config_data = cls._deep_merge(config_data, file_data)

        return config_data

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """
        Deep merge override dict into base dict.

        Args:
            base: Base dictionary
            override: Override dictionary (takes precedence)

        Returns:
            Merged dictionary
        """
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = Config._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
