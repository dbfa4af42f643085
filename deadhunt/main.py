"""Dead Hunt CLI - find exported components, hooks, functions and types nothing uses."""
import logging
from contextlib import nullcontext
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import typer
from rich.table import Table
from rich.markup import escape
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TaskProgressColumn,
    TimeElapsedColumn
)

from deadhunt.config import __version__, get_config
from deadhunt.analyzer.categorizer import Category
from deadhunt.analyzer.discovery import FileFilter, discover_files
from deadhunt.analyzer.export_registry import ExportRegistryBuilder
from deadhunt.analyzer.registry import SymbolRegistry
from deadhunt.analyzer.report import DeadSymbol, assemble_report
from deadhunt.analyzer.usage_resolver import UsageResolver
from deadhunt.utils.logger import setup_logging
from deadhunt.utils.safe_console import SafeConsole

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="deadhunt",
    help="Hunt exported components, hooks, functions and types that nothing else uses",
    add_completion=False
)
console = SafeConsole()

# Prompt labels, in menu order
CATEGORY_CHOICES = [
    (Category.COMPONENT, "Components (PascalCase)"),
    (Category.HOOK, "Custom Hooks (use...)"),
    (Category.FUNCTION, "Utility Functions (camelCase)"),
    (Category.TYPE, "Type Definitions (Interfaces/Types)"),
]


@dataclass
class HuntResult:
    """Outcome of one analysis run."""
    dead_symbols: Tuple[DeadSymbol, ...]
    registered: int
    export_files: List[str]
    usage_files: List[str]
    skipped_exports: List[str]
    skipped_usages: List[str]

    @property
    def is_clean(self) -> bool:
        return not self.dead_symbols


def analyze_project(scan_dir: str | Path, categories: Iterable[Category],
                    export_filter: FileFilter, usage_filter: FileFilter,
                    show_progress: bool = True) -> HuntResult:
    """Run both passes over a directory and assemble the dead-symbol report.

    Phase 1 registers every export found by `export_filter`; phase 2 scans
    every file found by `usage_filter` for references. The two filters are
    independent, so a file may be scanned for usages without its own
    exports being tracked (declaration files by default).

    Args:
        scan_dir: Directory to hunt in
        categories: Categories to track and report
        export_filter: File policy for the registration pass
        usage_filter: File policy for the usage pass
        show_progress: Render a transient progress bar

    Returns:
        HuntResult with unused symbols in file/declaration order

    Raises:
        ValueError: If no category is selected
    """
    categories = frozenset(categories)
    if not categories:
        raise ValueError("Select at least one category to hunt for")

    registry = SymbolRegistry(categories)

    if show_progress:
        progress_ctx = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True
        )
    else:
        progress_ctx = nullcontext()

    with progress_ctx as progress:
        advance = None

        # --- PHASE 1: REGISTER EXPORTS ---
        export_files = discover_files(scan_dir, export_filter)
        if show_progress:
            task = progress.add_task("[cyan]Phase 1/2: Registering exports...", total=len(export_files))
            advance = lambda _file: progress.advance(task)

        skipped_exports = ExportRegistryBuilder(registry).build(export_files, on_file=advance)

        # --- PHASE 2: RESOLVE USAGES ---
        usage_files = discover_files(scan_dir, usage_filter)
        if show_progress:
            progress.update(task, description="[magenta]Phase 2/2: Resolving usages...",
                            total=len(usage_files), completed=0)

        skipped_usages = UsageResolver(registry).resolve(usage_files, on_file=advance)

    logger.debug(
        "Registered %d symbols from %d files; scanned %d files for usages",
        len(registry), len(export_files), len(usage_files)
    )

    return HuntResult(
        dead_symbols=assemble_report(registry, categories),
        registered=len(registry),
        export_files=export_files,
        usage_files=usage_files,
        skipped_exports=skipped_exports,
        skipped_usages=skipped_usages,
    )


def parse_category_selection(answer: str) -> List[Category]:
    """Turn a prompt answer like "1,3" or "hook, type" into categories.

    Raises:
        ValueError: On an out-of-range number or unknown name
    """
    selected = []
    for token in answer.replace(",", " ").split():
        if token.isdigit():
            index = int(token)
            if not 1 <= index <= len(CATEGORY_CHOICES):
                raise ValueError(f"No option number {index}")
            category = CATEGORY_CHOICES[index - 1][0]
        else:
            category = Category.parse(token)
        if category not in selected:
            selected.append(category)
    return selected


def prompt_categories() -> List[Category]:
    """Ask which categories to hunt until at least one is chosen."""
    console.print("[bold]What do you want to hunt for?[/bold]")
    for index, (_, label) in enumerate(CATEGORY_CHOICES, start=1):
        console.print(f"  {index}) {escape(label)}")

    while True:
        answer = typer.prompt("Select options (numbers or names, comma-separated)",
                              default="", show_default=False)
        try:
            categories = parse_category_selection(answer)
        except ValueError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            continue
        if categories:
            return categories
        console.print("[red]Please select at least one option to hunt for[/red]")


def print_report(result: HuntResult) -> None:
    """Render the dead-symbol table (or the all-clear message)."""
    if result.is_clean:
        console.print("\n[green]✨ No dead code found! Your codebase is lean.[/green]")
        return

    table = Table(show_header=True, header_style="cyan")
    table.add_column("Type", width=15)
    table.add_column("Name", width=25)
    table.add_column("Source File", style="dim", width=60, no_wrap=False)

    for dead in result.dead_symbols:
        table.add_row(dead.category.value, dead.name, escape(dead.defining_file))

    console.print(f"\n[red]\U0001f480 Found {len(result.dead_symbols)} unused items:[/red]\n")
    console.print(table)

    skipped = len(set(result.skipped_exports) | set(result.skipped_usages))
    if skipped:
        console.print(f"[dim]Skipped {skipped} unparseable or unreadable files (use --verbose to list them)[/dim]")
    console.print(
        "\n[dim]Note: Double check dynamic imports or string-based references before deleting.[/dim]\n"
    )


def version_callback(value: bool):
    if value:
        console.print(f"deadhunt {__version__}")
        raise typer.Exit()


@app.command()
def hunt(
    scan_dir: Optional[str] = typer.Argument(None, help="Folder to scan for dead code (prompted if omitted)"),
    types: Optional[List[Category]] = typer.Option(
        None, "--type", "-t", case_sensitive=False,
        help="Category to hunt for; repeat for several (prompted if omitted)"
    ),
    ignore: Optional[List[str]] = typer.Option(None, "--ignore", help="Extra glob to exclude from both passes"),
    no_progress: bool = typer.Option(False, "--no-progress", help="Do not display the progress bar"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log skipped files and name collisions"),
    version: bool = typer.Option(False, "--version", callback=version_callback, is_eager=True,
                                 help="Show the version and exit"),
):
    """Report exported symbols that no other file references."""
    setup_logging(verbose)
    console.print("\n[bold cyan]\U0001f480 Welcome to React Dead Hunt[/bold cyan]\n")

    try:
        config = get_config()
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if scan_dir is None:
        scan_dir = typer.prompt("Folder to scan for dead code", default=config.scan_dir)

    categories = list(types) if types else (config.default_categories or prompt_categories())

    root = Path(scan_dir)
    if not root.is_dir():
        console.print(f"[bold red]Error:[/bold red] Folder does not exist: {escape(str(root))}")
        raise typer.Exit(1)

    export_filter = config.export_filter()
    usage_filter = config.usage_filter()
    if ignore:
        export_filter = export_filter.with_ignore(*ignore)
        usage_filter = usage_filter.with_ignore(*ignore)

    try:
        result = analyze_project(root, categories, export_filter, usage_filter,
                                 show_progress=not no_progress)
    except Exception as e:
        logger.debug("Analysis failed", exc_info=True)
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    print_report(result)


if __name__ == "__main__":
    app()
