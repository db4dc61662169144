"""
Rendering functions for repometa output.

This module handles all pretty-printing and table formatting.
Commands and services return data; this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from rich.markup import escape
from typing import List, Dict, Any, Optional

console = Console()


def _new_table(title: str) -> Table:
    return Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )


def render_table(headers: List[str], rows: List[List[Any]], title: Optional[str] = None) -> None:
    """
    Render a generic table with the given headers and rows.

    Args:
        headers: List of column headers
        rows: List of rows, where each row is a list of values
        title: Optional table title
    """
    if not rows:
        console.print("[yellow]No data to display.[/yellow]")
        return

    table = _new_table(title)
    for header in headers:
        table.add_column(header)
    for row in rows:
        table.add_row(*["" if val is None else escape(str(val)) for val in row])

    console.print(table)


def render_location_table(location: Dict[str, Any]) -> None:
    """Render a repository location as a two-column table."""
    table = _new_table("Repository Location")
    table.add_column("Directory", style="cyan")
    table.add_column("Path")

    table.add_row("Metadata", escape(location.get('git_directory') or ''))
    table.add_row("Common", escape(location.get('common_directory') or ''))
    working_directory = location.get('working_directory')
    table.add_row("Working", escape(working_directory) if working_directory else "[dim](none)[/dim]")

    console.print(table)


def render_source_roots_table(roots: List[Dict[str, Any]], warnings: List[Dict[str, Any]]) -> None:
    """
    Render source roots, followed by any warnings.

    Args:
        roots: SourceRoot dictionaries
        warnings: Diagnostic dictionaries
    """
    if not roots:
        console.print("[yellow]No source roots found.[/yellow]")
    else:
        table = _new_table("Source Roots")
        table.add_column("Path", style="cyan")
        table.add_column("Revision", style="green")
        table.add_column("Repository URL", style="dim")
        table.add_column("Nested Root", style="yellow")

        for root in roots:
            table.add_row(
                escape(root['path']),
                root['revision_id'][:12],
                escape(root['repository_url']) if root.get('repository_url') else "[red]unknown[/red]",
                escape(root.get('nested_root', '')),
            )

        console.print(table)

    render_diagnostics(warnings)


def render_submodules_table(submodules: List[Dict[str, Any]]) -> None:
    """Render accepted submodules."""
    if not submodules:
        console.print("[yellow]No submodules found.[/yellow]")
        return

    table = _new_table("Submodules")
    table.add_column("Name", style="cyan")
    table.add_column("Path")
    table.add_column("Commit", style="green")
    table.add_column("URL", style="dim")

    for submodule in submodules:
        commit = submodule.get('head_commit_sha')
        table.add_row(
            escape(submodule['name']),
            escape(submodule['path']),
            commit[:12] if commit else "[red]no commit[/red]",
            escape(submodule['url']),
        )

    console.print(table)


def render_diagnostics(diagnostics: List[Dict[str, Any]]) -> None:
    """Render diagnostics as yellow warning lines."""
    for diagnostic in diagnostics:
        subject = escape(f" [{diagnostic['subject']}]") if diagnostic.get('subject') else ""
        console.print(f"[yellow]⚠ {diagnostic['kind']}{subject}:[/yellow] {escape(diagnostic['message'])}")


def render_classification_table(results: List[Dict[str, Any]]) -> None:
    """Render file to repository assignments."""
    if not results:
        console.print("[yellow]No files given.[/yellow]")
        return

    table = _new_table("File Classification")
    table.add_column("File", style="cyan")
    table.add_column("Repository")

    for result in results:
        repository = result.get('repository')
        table.add_row(escape(result['path']), escape(repository) if repository else "[dim](outside)[/dim]")

    console.print(table)
