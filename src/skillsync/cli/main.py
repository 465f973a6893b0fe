"""CLI interface for skillsync using Typer."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from skillsync.cli.skills import skills_app
from skillsync.utils.config import Config
from skillsync.utils.logging import setup_logging

app = typer.Typer(
    name="skillsync",
    help="Skillsync: keep skill definitions in sync across coding tools",
    no_args_is_help=True,
    add_completion=True,
)
app.add_typer(skills_app, name="skills")

console = Console()


def load_config_callback(ctx: typer.Context, workspace: str):
    """Load configuration and store it in the context."""
    try:
        cfg = Config.load(Path(workspace).expanduser())
    except Exception as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        raise typer.Exit(1)

    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg
    return workspace


@app.callback()
def main(
    ctx: typer.Context,
    workspace: str = typer.Option(
        Path.home() / ".skillsync",
        "--workspace",
        "-w",
        help="Path to workspace directory",
        callback=load_config_callback,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Also print logs to the console"
    ),
) -> None:
    """
    Skillsync: keep skill definitions in sync across coding tools.

    Configuration is loaded from ~/.skillsync/ by default.
    Use --workspace to specify a custom workspace directory.
    """
    setup_logging(ctx.obj["config"], console_output=verbose)


@app.command("tools")
def list_tools(ctx: typer.Context) -> None:
    """List configured tools and whether they are installed."""
    config: Config = ctx.obj["config"]

    table = Table(title="Tools")
    table.add_column("ID", style="cyan")
    table.add_column("Label")
    table.add_column("Skills path")
    table.add_column("Installed")

    for tool in config.tools:
        installed = tool.skills_path.parent.exists()
        table.add_row(
            tool.id,
            tool.label,
            str(tool.skills_path),
            "[green]yes[/green]" if installed else "[red]no[/red]",
        )

    console.print(table)


if __name__ == "__main__":
    app()
