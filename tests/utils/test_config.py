"""Tests for config loading, validation and path resolution."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from skillsync.utils.config import CommandBackendConfig, Config, LocalBackendConfig


class TestPathResolution:
    """Tests for path resolution against workspace."""

    def test_resolves_default_paths_against_workspace(self):
        config = Config(workspace=Path("/workspace"))

        assert config.skills_path == Path("/workspace/skills")
        assert config.logging_path == Path("/workspace/.logs")
        assert config.index_path == Path("/workspace/skills.jsonl")
        assert config.menu_path == Path("/workspace/menu.json")

    def test_resolves_custom_relative_paths(self):
        config = Config(workspace=Path("/workspace"), skills_path=Path("store/skills"))

        assert config.skills_path == Path("/workspace/store/skills")

    def test_rejects_absolute_skills_path(self):
        with pytest.raises(ValidationError) as exc:
            Config(workspace=Path("/workspace"), skills_path=Path("/etc/skills"))

        assert "skills_path must be relative" in str(exc.value)

    def test_tool_paths_expand_user(self):
        config = Config(
            workspace=Path("/workspace"),
            tools=[{"id": "x", "label": "X", "skills_path": "~/.x/skills"}],
        )

        assert config.tools[0].skills_path == Path.home() / ".x" / "skills"


class TestConfigValidation:
    def test_default_tools_and_backend(self):
        config = Config(workspace=Path("/workspace"))

        assert [t.id for t in config.tools][:2] == ["claude_code", "codex"]
        assert isinstance(config.backend, LocalBackendConfig)
        assert config.sync_mode == "copy"

    def test_duplicate_tool_ids_rejected(self):
        with pytest.raises(ValidationError) as exc:
            Config(
                workspace=Path("/workspace"),
                tools=[
                    {"id": "x", "label": "X", "skills_path": "/x"},
                    {"id": "x", "label": "X2", "skills_path": "/x2"},
                ],
            )

        assert "Duplicate tool id" in str(exc.value)

    def test_command_backend(self):
        config = Config(
            workspace=Path("/workspace"),
            backend={"kind": "command", "command": ["skill-backend", "--json"]},
        )

        assert isinstance(config.backend, CommandBackendConfig)
        assert config.backend.command == ["skill-backend", "--json"]

    def test_command_backend_requires_command(self):
        with pytest.raises(ValidationError):
            Config(workspace=Path("/workspace"), backend={"kind": "command", "command": []})

    def test_invalid_sync_mode(self):
        with pytest.raises(ValidationError):
            Config(workspace=Path("/workspace"), sync_mode="hardlink")

    def test_get_tool(self, test_config):
        assert test_config.get_tool("beta").label == "Beta"
        assert test_config.get_tool("nope") is None


class TestLoad:
    def test_missing_files_use_defaults(self, tmp_path):
        config = Config.load(tmp_path)

        assert config.workspace == tmp_path
        assert config.skills_path == tmp_path / "skills"

    def test_runtime_overrides_user(self, tmp_path):
        (tmp_path / "config.user.yaml").write_text(
            yaml.dump({"sync_mode": "copy", "menu_file": "user-menu.json"})
        )
        (tmp_path / "config.runtime.yaml").write_text(yaml.dump({"sync_mode": "symlink"}))

        config = Config.load(tmp_path)

        assert config.sync_mode == "symlink"
        assert config.menu_path == tmp_path / "user-menu.json"

    def test_nested_backend_merge(self, tmp_path):
        (tmp_path / "config.user.yaml").write_text(
            yaml.dump({"backend": {"kind": "command", "command": ["a"]}})
        )
        (tmp_path / "config.runtime.yaml").write_text(
            yaml.dump({"backend": {"command": ["b"]}})
        )

        config = Config.load(tmp_path)

        assert config.backend.kind == "command"
        assert config.backend.command == ["b"]
