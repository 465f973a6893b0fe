"""Helpers for reading SKILL.md definition files."""

from pathlib import Path
from typing import Any

import yaml

SKILL_FILENAME = "SKILL.md"


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """
    Split YAML frontmatter from a markdown body.

    Args:
        content: Raw file content

    Returns:
        Tuple of (frontmatter dict, body). The dict is empty when the file
        has no frontmatter block.

    Raises:
        yaml.YAMLError: If the frontmatter block is not valid YAML
    """
    if not content.startswith("---\n"):
        return {}, content

    end_delimiter = content.find("\n---\n", 4)
    if end_delimiter == -1:
        return {}, content

    frontmatter_text = content[4:end_delimiter]
    body = content[end_delimiter + 5 :]

    raw_dict = yaml.safe_load(frontmatter_text) or {}
    if not isinstance(raw_dict, dict):
        return {}, body
    return raw_dict, body


def read_skill_metadata(skill_dir: Path) -> tuple[str, str]:
    """
    Read name and description from a skill directory's SKILL.md.

    Falls back to the directory name when the frontmatter has no name.

    Returns:
        Tuple of (name, description)
    """
    content = (skill_dir / SKILL_FILENAME).read_text(encoding="utf-8")
    frontmatter, _ = parse_frontmatter(content)
    name = str(frontmatter.get("name") or skill_dir.name)
    description = str(frontmatter.get("description") or "")
    return name, description
