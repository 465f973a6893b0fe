"""Skills subcommand group for skillsync CLI."""

import asyncio
from pathlib import Path
from typing import Annotated, Awaitable, Callable

import questionary
import typer
from rich.console import Console
from rich.table import Table

from skillsync.core.context import SharedContext
from skillsync.core.errors import SkillNotFoundError
from skillsync.core.models import Skill
from skillsync.core.sync_engine import BatchResult, ConflictPolicy, SyncStatus
from skillsync.frontend import ConsoleFrontend
from skillsync.utils.config import Config

skills_app = typer.Typer(
    help="Manage skills and sync them to tools",
    no_args_is_help=True,
    add_completion=True,
)
console = Console()

ToolOption = Annotated[
    list[str] | None,
    typer.Option("--tool", "-t", help="Tool ID to sync to (repeatable)"),
]

STATUS_STYLES = {
    SyncStatus.SYNCED: "green",
    SyncStatus.OVERWRITTEN: "yellow",
    SyncStatus.UNSYNCED: "cyan",
    SyncStatus.SKIPPED: "dim",
    SyncStatus.FAILED: "red",
}


def _build_context(ctx: typer.Context) -> SharedContext:
    config: Config = ctx.obj["config"]
    return SharedContext(config, frontend=ConsoleFrontend(console))


def _run(ctx: typer.Context, action: Callable[[SharedContext], Awaitable[None]]) -> None:
    """Load skills, then run ``action`` against a fresh context."""
    context = _build_context(ctx)

    async def _execute() -> None:
        if not await context.actions.load():
            raise typer.Exit(1)
        try:
            await action(context)
        except SkillNotFoundError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)

    asyncio.run(_execute())


def _check_tools(context: SharedContext, tool_ids: list[str]) -> None:
    unknown = [t for t in tool_ids if context.config.get_tool(t) is None]
    if unknown:
        known = ", ".join(t.id for t in context.config.tools)
        console.print(f"[red]Unknown tool(s): {', '.join(unknown)}[/red]")
        console.print(f"Known tools: {known}")
        raise typer.Exit(1)


def _print_batch(context: SharedContext, batch: BatchResult) -> None:
    for result in batch.results.values():
        style = STATUS_STYLES[result.status]
        label = context.engine.tool_label(result.tool_id)
        line = f"  {label}: [{style}]{result.status.value}[/{style}]"
        if result.error is not None:
            line += f" ({result.error})"
        console.print(line)


def _format_tools(context: SharedContext, skill: Skill) -> str:
    return ", ".join(context.engine.tool_label(t) for t in skill.tool_ids) or "-"


@skills_app.command("list")
def list_skills(ctx: typer.Context) -> None:
    """List skills in display order."""

    async def action(context: SharedContext) -> None:
        table = Table(title=f"Skills: {len(context.skills)}")
        table.add_column("#", justify="right")
        table.add_column("ID", style="cyan")
        table.add_column("Name", style="bold")
        table.add_column("Synced to")

        for skill in context.skills:
            table.add_row(
                str(skill.position), skill.id, skill.name, _format_tools(context, skill)
            )
        console.print(table)

    _run(ctx, action)


@skills_app.command()
def add(
    ctx: typer.Context,
    source: Path = typer.Argument(..., help="Directory containing SKILL.md"),
    tool: ToolOption = None,
) -> None:
    """Add a skill and sync it to tools, confirming any overwrite."""
    tool_ids = tool or []

    async def action(context: SharedContext) -> None:
        _check_tools(context, tool_ids)
        skill = await context.actions.add(source, tool_ids)
        if skill is None:
            raise typer.Exit(1)
        console.print(f"[green]Added[/green] {skill.name}")
        for target in skill.targets:
            console.print(f"  {context.engine.tool_label(target.tool_id)}: {target.target_path}")

    _run(ctx, action)


@skills_app.command("import")
def import_skills(
    ctx: typer.Context,
    directory: Path = typer.Argument(..., help="Directory of skill directories"),
    tool: ToolOption = None,
) -> None:
    """Import every skill under a directory. Existing targets are skipped."""
    tool_ids = tool or []

    async def action(context: SharedContext) -> None:
        _check_tools(context, tool_ids)
        imported = await context.actions.import_directory(directory, tool_ids)
        for skill in imported:
            console.print(f"  {skill.name}: {_format_tools(context, skill)}")

    _run(ctx, action)


@skills_app.command()
def toggle(
    ctx: typer.Context,
    skill_ref: str = typer.Argument(..., metavar="SKILL", help="Skill ID or name"),
    tool_id: str = typer.Argument(..., metavar="TOOL", help="Tool ID"),
) -> None:
    """Sync a skill to a tool, or remove it if it is already synced."""

    async def action(context: SharedContext) -> None:
        _check_tools(context, [tool_id])
        skill = context.actions.find_skill(skill_ref)
        result = await context.actions.toggle_tool(skill, tool_id)
        if result is None:
            raise typer.Exit(1)
        style = STATUS_STYLES[result.status]
        console.print(
            f"{skill.name} → {context.engine.tool_label(tool_id)}: "
            f"[{style}]{result.status.value}[/{style}]"
        )

    _run(ctx, action)


@skills_app.command()
def sync(
    ctx: typer.Context,
    skill_ref: str = typer.Argument(..., metavar="SKILL", help="Skill ID or name"),
    tool: ToolOption = None,
    on_conflict: ConflictPolicy = typer.Option(
        ConflictPolicy.CONFIRM,
        "--on-conflict",
        help="Ask before overwriting existing targets, or skip them",
    ),
) -> None:
    """Sync a skill to several tools in order."""
    tool_ids = tool or []

    async def action(context: SharedContext) -> None:
        if not tool_ids:
            console.print("[yellow]No tools given. Use --tool.[/yellow]")
            raise typer.Exit(1)
        _check_tools(context, tool_ids)
        skill = context.actions.find_skill(skill_ref)
        batch = await context.actions.sync_to_tools(skill, tool_ids, on_conflict)
        console.print(f"[bold]{skill.name}[/bold]")
        _print_batch(context, batch)
        if batch.failed:
            raise typer.Exit(1)

    _run(ctx, action)


@skills_app.command()
def update(
    ctx: typer.Context,
    skill_ref: str = typer.Argument(..., metavar="SKILL", help="Skill ID or name"),
) -> None:
    """Refresh a skill from its source."""

    async def action(context: SharedContext) -> None:
        skill = context.actions.find_skill(skill_ref)
        if not await context.actions.update(skill):
            raise typer.Exit(1)
        console.print(f"[green]Updated[/green] {skill.name}")

    _run(ctx, action)


@skills_app.command()
def delete(
    ctx: typer.Context,
    skill_ref: str = typer.Argument(..., metavar="SKILL", help="Skill ID or name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a skill and remove it from every tool."""

    async def action(context: SharedContext) -> None:
        skill = context.actions.find_skill(skill_ref)
        context.actions.request_delete(skill.id)

        if not yes:
            confirmed = await questionary.confirm(
                f"Delete '{skill.name}' and remove it from all tools?",
                default=False,
            ).ask_async()
            if not confirmed:
                context.actions.cancel_delete()
                console.print("Cancelled")
                return

        if not await context.actions.confirm_delete():
            raise typer.Exit(1)
        console.print(f"[green]Deleted[/green] {skill.name}")

    _run(ctx, action)


@skills_app.command()
def move(
    ctx: typer.Context,
    skill_ref: str = typer.Argument(..., metavar="SKILL", help="Skill ID or name"),
    to_index: int = typer.Argument(..., help="New position (0-based)"),
) -> None:
    """Move a skill to a new position in the list."""

    async def action(context: SharedContext) -> None:
        skill = context.actions.find_skill(skill_ref)
        from_index = context.skills.index_of(skill.id)

        if from_index == to_index or not 0 <= to_index < len(context.skills):
            console.print("Nothing to move")
            return

        if not await context.actions.reorder(from_index, to_index):
            raise typer.Exit(1)
        console.print(f"Moved {skill.name} to position {to_index}")

    _run(ctx, action)
