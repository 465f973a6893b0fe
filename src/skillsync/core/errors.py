"""Exceptions for skillsync, including the backend error sum type.

Backend failures cross the process boundary as prefix-tagged, pipe-delimited
strings. ``decode_backend_error`` turns such a string into one of the typed
``BackendError`` variants exactly once, at the boundary; everything above it
works with the typed exceptions only.

Wire formats:
    TARGET_EXISTS|<path>
    SKILL_EXISTS|<name>
    TOOL_NOT_INSTALLED|<toolKey>|<skillsPath>
    <anything else>                 -> BackendFailure (shown verbatim)
"""

import re

TARGET_EXISTS_PREFIX = "TARGET_EXISTS|"
SKILL_EXISTS_PREFIX = "SKILL_EXISTS|"
TOOL_NOT_INSTALLED_PREFIX = "TOOL_NOT_INSTALLED|"


class SkillSyncError(Exception):
    """Base class for all skillsync errors."""


class SkillNotFoundError(SkillSyncError):
    """Raised when a skill id or name does not resolve."""

    def __init__(self, skill_ref: str):
        super().__init__(f"Skill not found: {skill_ref}")
        self.skill_ref = skill_ref


class TransportError(SkillSyncError):
    """Raw failure from a backend transport, carrying the wire string."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BackendError(SkillSyncError):
    """Typed failure reported by a backend operation."""

    def to_wire(self) -> str:
        """Encode the error in the backend wire format."""
        raise NotImplementedError


class TargetExists(BackendError):
    """The destination path is already occupied by unrelated content."""

    def __init__(self, path: str):
        super().__init__(f"Target already exists: {path}")
        self.path = path

    def to_wire(self) -> str:
        return f"{TARGET_EXISTS_PREFIX}{self.path}"


class SkillExists(BackendError):
    """A skill with the same name is already stored centrally."""

    def __init__(self, name: str):
        super().__init__(f"Skill already exists: {name}")
        self.name = name

    def to_wire(self) -> str:
        return f"{SKILL_EXISTS_PREFIX}{self.name}"


class ToolNotInstalled(BackendError):
    """The tool integration is absent on this machine."""

    def __init__(self, tool_key: str, skills_path: str):
        super().__init__(f"Tool not installed: {tool_key} (expected {skills_path})")
        self.tool_key = tool_key
        self.skills_path = skills_path

    def to_wire(self) -> str:
        return f"{TOOL_NOT_INSTALLED_PREFIX}{self.tool_key}|{self.skills_path}"


class BackendFailure(BackendError):
    """Any other backend failure (I/O, version control, ...)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_wire(self) -> str:
        return self.message


_TARGET_EXISTS_RE = re.compile(r"TARGET_EXISTS\|(.+)")
_SKILL_EXISTS_RE = re.compile(r"SKILL_EXISTS\|(.+)")


def decode_backend_error(raw: str) -> BackendError:
    """
    Decode a wire error string into a typed BackendError.

    TARGET_EXISTS and SKILL_EXISTS are matched anywhere in the string, so
    transport decorations such as ``"Error: TARGET_EXISTS|/path"`` still
    decode. Their payload runs from the first pipe to the end of that line.
    TOOL_NOT_INSTALLED must start the string and has exactly three fields.

    Args:
        raw: Error string as received from the backend

    Returns:
        The matching BackendError variant; BackendFailure when untagged
    """
    raw = str(raw)

    if raw.startswith(TOOL_NOT_INSTALLED_PREFIX):
        parts = raw.split("|")
        tool_key = parts[1] if len(parts) > 1 else ""
        skills_path = parts[2] if len(parts) > 2 else ""
        return ToolNotInstalled(tool_key, skills_path)

    match = _TARGET_EXISTS_RE.search(raw)
    if match:
        return TargetExists(match.group(1))

    if SKILL_EXISTS_PREFIX in raw:
        match = _SKILL_EXISTS_RE.search(raw)
        return SkillExists(match.group(1) if match else "")

    return BackendFailure(raw)
