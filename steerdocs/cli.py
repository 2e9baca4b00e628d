"""CLI entry point for steerdocs."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from steerdocs.activity import read_activity_log
from steerdocs.config import Config
from steerdocs.factory import build_recommender
from steerdocs.recommend.errors import RecommendationError
from steerdocs.recommend.models import RecommendationOptions, ScoredDocument, WorkspaceContext

app = typer.Typer(help="Recommend steering documents for AI coding agents based on your project.")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def _load_config(catalog_dir: str | None) -> Config:
    config = Config.load()
    if catalog_dir:
        config.catalog_dir = Path(catalog_dir)

    issues = config.validate()
    if issues:
        for issue in issues:
            rprint(f"[red]Config error: {issue}[/red]")
        raise typer.Exit(1)
    return config


def _resolve_workspace(path: str | None, config: Config) -> Path:
    if path:
        return Path(path).resolve()
    return (config.workspace or Path.cwd()).resolve()


def _render_recommendations(results: list[ScoredDocument]) -> None:
    if not results:
        rprint("[yellow]No recommendations found for your workspace.[/yellow]")
        return

    table = Table(title="Recommended Steering Documents")
    table.add_column("Score", justify="right")
    table.add_column("Document")
    table.add_column("Category")
    table.add_column("Why")
    table.add_column("Installed", justify="center")

    for scored in results:
        table.add_row(
            str(scored.score),
            scored.document.name,
            scored.document.category,
            "\n".join(r.description for r in scored.reasons),
            "[green]yes[/green]" if scored.is_installed else "",
        )
    Console().print(table)


def _render_context(root: Path, context: WorkspaceContext) -> None:
    rprint(f"[bold]Workspace:[/bold] {root}")
    rprint(f"  Project type: {context.project_type.value}")
    rprint(f"  Languages:    {', '.join(sorted(context.languages))}")
    rprint(f"  Has tests:    {'yes' if context.has_tests else 'no'}")

    if context.frameworks:
        rprint("\n[bold]Frameworks:[/bold]")
        for fw in context.frameworks:
            rprint(f"  {fw.name} {fw.version} (confidence {fw.confidence:.2f})")

    if context.dependencies:
        rprint(f"\n[bold]Dependencies:[/bold] {len(context.dependencies)}")
        for dep in context.dependencies[:15]:
            dev = " [dim](dev)[/dim]" if dep.is_dev else ""
            rprint(f"  {dep.name} {dep.version} ({dep.category.value}){dev}")

    if context.file_patterns:
        rprint("\n[bold]File patterns:[/bold]")
        for p in context.file_patterns:
            rprint(f"  {p.pattern}: {p.count} file(s), significance {p.significance:.2f}")

    if context.installed_docs:
        rprint(f"\n[bold]Installed documents:[/bold] {', '.join(context.installed_docs)}")


@app.command()
def recommend(
    path: str = typer.Argument(None, help="Workspace root (defaults to the current directory)"),
    max_results: int = typer.Option(10, "--max-results", "-n", help="Maximum number of recommendations"),
    min_score: int = typer.Option(10, "--min-score", help="Minimum relevance score"),
    exclude_installed: bool = typer.Option(False, "--exclude-installed", help="Hide documents already installed"),
    catalog_dir: str = typer.Option(None, "--catalog-dir", help="Use a local catalog checkout instead of GitHub"),
    format: str = typer.Option("text", "--format", "-f", help="Output format: text or json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Recommend steering documents for a workspace."""
    _setup_logging(verbose)
    config = _load_config(catalog_dir)
    root = _resolve_workspace(path, config)
    options = RecommendationOptions(
        max_results=max_results,
        include_installed=not exclude_installed,
        min_score=min_score,
    )

    async def run() -> list[ScoredDocument]:
        recommender = build_recommender(config, root)
        try:
            return await recommender.service.get_recommendations(options)
        finally:
            recommender.close()

    try:
        results = asyncio.run(run())
    except RecommendationError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if format == "json":
        typer.echo(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        _render_recommendations(results)


@app.command()
def analyze(
    path: str = typer.Argument(None, help="Workspace root (defaults to the current directory)"),
    format: str = typer.Option("text", "--format", "-f", help="Output format: text or json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Show the technology profile detected for a workspace."""
    _setup_logging(verbose)
    config = Config.load()
    root = _resolve_workspace(path, config)

    async def run() -> WorkspaceContext:
        recommender = build_recommender(config, root)
        try:
            return await recommender.service.analyze_workspace()
        finally:
            recommender.close()

    try:
        context = asyncio.run(run())
    except RecommendationError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if format == "json":
        typer.echo(json.dumps(context.to_dict(), indent=2))
    else:
        _render_context(root, context)


@app.command()
def activity(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of entries to show"),
    tool: str = typer.Option(None, "--tool", help="Only show calls to this MCP tool"),
    workspace: str = typer.Option(None, "--workspace", "-w", help="Only show calls for this workspace"),
) -> None:
    """Show what AI agents were recommended through the MCP server."""
    workspace_filter = str(Path(workspace).resolve()) if workspace else None
    entries = read_activity_log(limit=limit, tool_name=tool, workspace=workspace_filter)
    if not entries:
        rprint("[yellow]No activity recorded yet.[/yellow]")
        return

    for entry in entries:
        summary = escape(entry.summary())
        if entry.error:
            summary = f"[red]{summary}[/red]"
        rprint(
            f"{entry.timestamp}  [bold]{entry.tool_name}[/bold]  "
            f"{entry.duration_ms}ms  [dim]{escape(entry.workspace or '-')}[/dim]"
        )
        if summary:
            rprint(f"  {summary}")


@app.command()
def serve(
    workspace: str = typer.Option(None, "--workspace", "-w", help="Workspace root (defaults to STEERDOCS_WORKSPACE, then the current directory)"),
) -> None:
    """Start the MCP server (called by Claude Code / Cursor automatically)."""
    from steerdocs.mcp_server import main as mcp_main
    asyncio.run(mcp_main(Path(workspace) if workspace else None))


if __name__ == "__main__":
    app()
