"""Abstract base class for frontend implementations."""

from abc import ABC, abstractmethod

from skillsync.core.models import ConflictChoice


class Frontend(ABC):
    """Abstract interface for the presentation layer.

    The sync core only talks to the user through this interface: conflict
    prompts, overwrite confirmations and error reporting.
    """

    @abstractmethod
    async def ask_conflict(
        self,
        skill_name: str,
        tool_label: str,
        target_path: str,
        has_more_pending: bool,
    ) -> ConflictChoice | None:
        """
        Ask how to resolve an occupied target.

        Args:
            skill_name: Display name of the skill being synced
            tool_label: Display label of the tool
            target_path: Existing path at the destination
            has_more_pending: Whether more tools remain in the batch. When
                False, OVERWRITE_ALL must not be offered.

        Returns:
            The user's choice, or None if the prompt was cancelled
        """

    @abstractmethod
    async def confirm_skill_overwrite(self, skill_name: str) -> bool:
        """Ask whether an existing central skill should be replaced."""

    @abstractmethod
    async def show_message(self, content: str) -> None:
        """Display an informational message."""

    @abstractmethod
    async def show_error(self, content: str) -> None:
        """Display an error message verbatim."""

    @abstractmethod
    async def show_tool_not_installed(self, tool_label: str, skills_path: str) -> None:
        """Display the missing-tool dialog with the expected skills path."""


class SilentFrontend(Frontend):
    """No-op frontend for unattended execution. Skips every conflict."""

    async def ask_conflict(
        self,
        skill_name: str,
        tool_label: str,
        target_path: str,
        has_more_pending: bool,
    ) -> ConflictChoice | None:
        return ConflictChoice.SKIP

    async def confirm_skill_overwrite(self, skill_name: str) -> bool:
        return False

    async def show_message(self, content: str) -> None:
        pass

    async def show_error(self, content: str) -> None:
        pass

    async def show_tool_not_installed(self, tool_label: str, skills_path: str) -> None:
        pass
