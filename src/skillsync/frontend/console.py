"""Console frontend implementation using Rich and questionary."""

import questionary
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from skillsync.core.models import ConflictChoice
from .base import Frontend


class ConsoleFrontend(Frontend):
    """Console-based frontend using Rich for output and questionary for prompts."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    async def ask_conflict(
        self,
        skill_name: str,
        tool_label: str,
        target_path: str,
        has_more_pending: bool,
    ) -> ConflictChoice | None:
        """Prompt with overwrite / skip, plus overwrite-all when more tools remain."""
        self.console.print(
            f"[yellow]'{skill_name}' already exists in {tool_label}:[/yellow] {target_path}"
        )

        choices = [questionary.Choice("Overwrite", value=ConflictChoice.OVERWRITE)]
        if has_more_pending:
            choices.append(
                questionary.Choice(
                    "Overwrite all remaining", value=ConflictChoice.OVERWRITE_ALL
                )
            )
        choices.append(questionary.Choice("Skip", value=ConflictChoice.SKIP))

        # ask_async returns None when the prompt is interrupted
        return await questionary.select(
            "Target already exists. What should be done?",
            choices=choices,
            default=ConflictChoice.SKIP,
        ).ask_async()

    async def confirm_skill_overwrite(self, skill_name: str) -> bool:
        answer = await questionary.confirm(
            f"Skill '{skill_name}' already exists. Overwrite it?",
            default=False,
        ).ask_async()
        return bool(answer)

    async def show_message(self, content: str) -> None:
        self.console.print(content)

    async def show_error(self, content: str) -> None:
        self.console.print(Text(content, style="red"))

    async def show_tool_not_installed(self, tool_label: str, skills_path: str) -> None:
        """Display a panel naming the tool and the skills path that was checked."""
        body = Text()
        body.append(f"{tool_label} does not appear to be installed.\n", style="bold")
        body.append(f"Check the skills path: {skills_path}", style="dim")
        self.console.print(Panel(body, title="Error", border_style="red"))
