"""
ats-grid Command Line Interface

Previews and exports row files through the grid core and manages saved
views from the terminal.
"""

import csv
import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="ats-grid",
    help="Headless data grid for applicant tracking tables",
    add_completion=False,
)
console = Console()


@app.callback()
def main():
    """Configure logging before any command runs."""
    from ats_grid.utils.logger import setup_logging

    setup_logging()


# =============================================================================
# Helpers
# =============================================================================


def _load_rows(path: Path) -> list[dict[str, Any]]:
    if not path.exists():
        console.print(f"[red]Error: File not found: {path}[/red]")
        raise typer.Exit(1)
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: {path} is not valid JSON: {e}[/red]")
        raise typer.Exit(1)

    rows = payload.get("rows", []) if isinstance(payload, dict) else payload
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        console.print("[red]Error: Expected a JSON list of objects (or {\"rows\": [...]})[/red]")
        raise typer.Exit(1)
    return rows


def _infer_field_type(values: list[Any]):
    """NUMBER or DATE when every present value is one, TEXT otherwise."""
    from ats_grid.core.values import is_number, parse_date_like
    from ats_grid.utils.constants import FieldType

    present = [v for v in values if v is not None and v != ""]
    if not present:
        return FieldType.TEXT
    if all(is_number(v) for v in present):
        return FieldType.NUMBER
    if all(isinstance(v, str) and parse_date_like(v) is not None for v in present):
        return FieldType.DATE
    return FieldType.TEXT


def _generic_columns(rows: list[dict[str, Any]]) -> list:
    from ats_grid.core import Column

    values: dict[str, list[Any]] = {}
    for row in rows:
        for key, value in row.items():
            values.setdefault(key, []).append(value)
    return [
        Column(id=key, label=key.replace("_", " ").title(), field_type=_infer_field_type(column_values))
        for key, column_values in values.items()
    ]


def _parse_filter(expression: str) -> tuple[str, Any]:
    """Parse ``column=value``; JSON values (numbers, lists, objects) are decoded."""
    column_id, sep, raw = expression.partition("=")
    if not sep or not column_id.strip():
        console.print(f"[red]Invalid filter: {expression} (expected column=value)[/red]")
        raise typer.Exit(1)
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return column_id.strip(), value


def _parse_sort(expression: str) -> tuple[str, str]:
    """Parse ``column`` or ``column:desc``."""
    column_id, _, direction = expression.partition(":")
    direction = (direction or "asc").lower()
    if direction not in ("asc", "desc"):
        console.print(f"[red]Invalid sort direction: {direction} (expected asc or desc)[/red]")
        raise typer.Exit(1)
    return column_id.strip(), direction


def _get_manager(store: Optional[Path]):
    from ats_grid.core import SavedViewManager
    from ats_grid.data.repositories import JsonViewRepository

    if store is not None:
        return SavedViewManager(JsonViewRepository(store))
    return SavedViewManager()


def _find_view(manager, ref: str):
    """Look a view up by id, then by name."""
    from ats_grid.core import ViewNotFoundError

    try:
        return manager.get(ref)
    except ViewNotFoundError:
        view = manager.find_by_name(ref)
        if view is None:
            console.print(f"[red]Saved view not found: {ref}[/red]")
            raise typer.Exit(1)
        return view


def _build_grid(
    rows_file: Path,
    candidates: bool,
    id_field: str,
    filters: Optional[list[str]],
    quick: Optional[str],
    preset: Optional[str],
    sorts: Optional[list[str]],
    view_ref: Optional[str] = None,
    store: Optional[Path] = None,
):
    from ats_grid.core import DataGrid, DuplicateRowIdError, GridError, SortState

    rows = _load_rows(rows_file)

    if candidates:
        from ats_grid.ats import DEFAULT_QUICK_FILTERS, create_candidate_columns

        columns = create_candidate_columns()
        presets = DEFAULT_QUICK_FILTERS
    else:
        columns = _generic_columns(rows)
        presets = ()

    if not columns:
        console.print("[yellow]No rows found.[/yellow]")
        raise typer.Exit(0)

    try:
        grid = DataGrid(
            columns,
            get_row_id=lambda row: row.get(id_field),
            rows=rows,
            quick_filter_presets=presets,
        )
    except DuplicateRowIdError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("[dim]Use --id-field to pick a unique field.[/dim]")
        raise typer.Exit(1)

    if view_ref:
        manager = _get_manager(store)
        view = _find_view(manager, view_ref)
        result = manager.apply(view, grid.columns, grid.state)
        for warning in result.warnings:
            console.print(f"[yellow]Warning: {warning}[/yellow]")
        grid.set_state(result.state)

    try:
        if preset:
            grid.apply_quick_filter_preset(preset)
        for expression in filters or []:
            grid.apply_filter(*_parse_filter(expression))
        if quick:
            grid.set_quick_filter(quick)
        if sorts:
            grid.apply_sort(SortState.of(*(_parse_sort(s) for s in sorts)))
    except (GridError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    return grid


# Shared option declarations
ROWS_ARG = typer.Argument(..., help="JSON file with a list of row objects")
CANDIDATES_OPT = typer.Option(False, "--candidates", help="Use the candidate table columns and presets")
ID_FIELD_OPT = typer.Option("id", "--id-field", help="Row field holding the unique row id")
FILTER_OPT = typer.Option(None, "--filter", "-f", help="Column filter as column=value (repeatable)")
QUICK_OPT = typer.Option(None, "--quick", "-q", help="Quick filter text")
PRESET_OPT = typer.Option(None, "--preset", "-p", help="Quick filter preset id")
SORT_OPT = typer.Option(None, "--sort", "-s", help="Sort as column[:asc|desc] (repeatable)")
VIEW_OPT = typer.Option(None, "--view", help="Saved view id or name to apply first")
STORE_OPT = typer.Option(None, "--store", help="Saved view JSON file (defaults to configured store)")


# =============================================================================
# Commands
# =============================================================================


@app.command()
def version():
    """Show application version."""
    from ats_grid import __app_name__, __version__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show configuration."""
    from ats_grid.utils.config import get_settings

    settings = get_settings()

    table = Table(title="ats-grid Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Density", settings.grid.density.value)
    table.add_row("Row Height", f"{settings.grid.effective_row_height:g}")
    table.add_row("Overscan", str(settings.grid.overscan))
    table.add_row("Nulls Position", settings.grid.nulls_position.value)
    table.add_row("View Store", settings.views.backend)
    if settings.views.backend == "json":
        table.add_row("View File", str(settings.views.json_path))
    elif settings.views.backend == "mongo":
        table.add_row("Database Host", settings.database.host)
        table.add_row("Database Name", settings.database.name)
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def init_views():
    """Check the MongoDB view store and create its indexes."""
    from ats_grid.data.database import get_database_manager
    from ats_grid.utils.config import get_settings

    settings = get_settings()
    if settings.views.backend != "mongo":
        console.print(f"[yellow]View store is '{settings.views.backend}'; nothing to initialize.[/yellow]")
        raise typer.Exit(0)

    console.print("[yellow]Initializing view store...[/yellow]")
    db_manager = get_database_manager()

    console.print("  Checking database connection...")
    if not db_manager.check_connection():
        console.print("[red]Error: Could not connect to MongoDB.[/red]")
        console.print("[dim]Make sure MongoDB is running and connection settings are correct.[/dim]")
        raise typer.Exit(1)
    console.print("  [green]✓[/green] Connected to MongoDB")

    db_manager.ensure_view_indexes(settings.views.collection_name)
    console.print("  [green]✓[/green] Indexes created")


@app.command()
def preview(
    rows_file: Path = ROWS_ARG,
    candidates: bool = CANDIDATES_OPT,
    id_field: str = ID_FIELD_OPT,
    filters: Optional[list[str]] = FILTER_OPT,
    quick: Optional[str] = QUICK_OPT,
    preset: Optional[str] = PRESET_OPT,
    sorts: Optional[list[str]] = SORT_OPT,
    view: Optional[str] = VIEW_OPT,
    store: Optional[Path] = STORE_OPT,
    offset: float = typer.Option(0.0, "--offset", "-o", help="Scroll offset in pixels"),
    height: float = typer.Option(480.0, "--height", help="Viewport height in pixels"),
):
    """Render the visible window of a row file."""
    grid = _build_grid(rows_file, candidates, id_field, filters, quick, preset, sorts, view, store)

    rendered = grid.visible_rows(offset, height, overscan=0)
    columns = grid.visible_columns()
    total = len(grid.store)
    matched = len(grid.derived)

    if not rendered:
        console.print(f"[yellow]No rows match ({total} rows loaded).[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Rows {rendered[0].index + 1}-{rendered[-1].index + 1} of {matched} (from {total})")
    for column in columns:
        table.add_column(column.label, style="cyan" if column.pinned else None, overflow="ellipsis")
    for row in rendered:
        table.add_row(*(row.cells[column.id] for column in columns))

    console.print(table)

    active = grid.active_filters()
    if active:
        chips = ", ".join(f"{f.label}: {f.display}" for f in active)
        console.print(f"[dim]Filters: {chips}[/dim]")
    if grid.state.sort.entries:
        chain = ", ".join(f"{e.column_id} {e.direction.value}" for e in grid.state.sort.entries)
        console.print(f"[dim]Sort: {chain}[/dim]")


@app.command()
def export(
    rows_file: Path = ROWS_ARG,
    output: Path = typer.Option(..., "--output", "-o", help="CSV file to write"),
    scope: str = typer.Option("filtered", "--scope", help="visible, filtered or all"),
    candidates: bool = CANDIDATES_OPT,
    id_field: str = ID_FIELD_OPT,
    filters: Optional[list[str]] = FILTER_OPT,
    quick: Optional[str] = QUICK_OPT,
    preset: Optional[str] = PRESET_OPT,
    sorts: Optional[list[str]] = SORT_OPT,
    view: Optional[str] = VIEW_OPT,
    store: Optional[Path] = STORE_OPT,
    offset: float = typer.Option(0.0, "--offset", help="Scroll offset for the visible scope"),
    height: float = typer.Option(480.0, "--height", help="Viewport height for the visible scope"),
):
    """Export rows as CSV."""
    from ats_grid.utils.constants import ExportScope

    try:
        export_scope = ExportScope(scope.lower())
    except ValueError:
        console.print(f"[red]Invalid scope: {scope}[/red]")
        console.print("[dim]Valid scopes: visible, filtered, all[/dim]")
        raise typer.Exit(1)

    grid = _build_grid(rows_file, candidates, id_field, filters, quick, preset, sorts, view, store)
    if export_scope is ExportScope.VISIBLE:
        grid.compute_window(offset, height, overscan=0)

    records = grid.export_records(export_scope)
    fieldnames = [column.label for column in grid.visible_columns()]

    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(records)

    console.print(f"[green]✓[/green] Exported {len(records)} rows to {output}")


@app.command()
def save_view(
    name: str = typer.Argument(..., help="Name for the view"),
    rows_file: Path = ROWS_ARG,
    candidates: bool = CANDIDATES_OPT,
    id_field: str = ID_FIELD_OPT,
    filters: Optional[list[str]] = FILTER_OPT,
    quick: Optional[str] = QUICK_OPT,
    preset: Optional[str] = PRESET_OPT,
    sorts: Optional[list[str]] = SORT_OPT,
    hide: Optional[list[str]] = typer.Option(None, "--hide", help="Column to hide (repeatable)"),
    pin: Optional[list[str]] = typer.Option(None, "--pin", help="Pin as column:start|end (repeatable)"),
    default: bool = typer.Option(False, "--default", help="Make this the default view"),
    store: Optional[Path] = STORE_OPT,
):
    """Save the configuration built from the options as a named view."""
    from ats_grid.core import GridError

    grid = _build_grid(rows_file, candidates, id_field, filters, quick, preset, sorts)
    try:
        for column_id in hide or []:
            grid.hide_column(column_id)
        for expression in pin or []:
            column_id, _, side = expression.partition(":")
            grid.pin_column(column_id, side or "start")
    except (GridError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    manager = _get_manager(store)
    try:
        saved = manager.create(name, grid.state, is_default=default)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Saved view [cyan]{saved.name}[/cyan]")
    console.print(f"  ID: [dim]{saved.id}[/dim]")


@app.command()
def list_views(store: Optional[Path] = STORE_OPT):
    """List saved views."""
    views = _get_manager(store).load()

    if not views:
        console.print("[yellow]No saved views.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Saved Views ({len(views)} total)")
    table.add_column("ID", style="dim", width=24)
    table.add_column("Name", style="cyan")
    table.add_column("Filters", justify="right")
    table.add_column("Sort")
    table.add_column("Default", justify="center")
    table.add_column("Updated")

    for view in views:
        sort = ", ".join(f"{e.column_id} {e.direction}" for e in view.sort_state) or "-"
        table.add_row(
            view.id,
            view.name[:30] + "..." if len(view.name) > 30 else view.name,
            str(len(view.filter_state) + (1 if view.quick_filter else 0)),
            sort,
            "[green]✓[/green]" if view.is_default else "",
            view.updated_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@app.command()
def show_view(
    view_ref: str = typer.Argument(..., help="View id or name"),
    store: Optional[Path] = STORE_OPT,
):
    """Show a saved view in detail."""
    view = _find_view(_get_manager(store), view_ref)

    console.print(f"\n[bold cyan]Saved View[/bold cyan]")
    console.print(f"[dim]{'─' * 50}[/dim]")
    console.print(f"[bold]ID:[/bold] {view.id}")
    console.print(f"[bold]Name:[/bold] {view.name}")
    console.print(f"[bold]Default:[/bold] {'yes' if view.is_default else 'no'}")
    console.print(f"[bold]Created:[/bold] {view.created_at}")
    console.print(f"[bold]Updated:[/bold] {view.updated_at}")

    if view.quick_filter:
        console.print(f"\n[bold]Quick Filter:[/bold] {view.quick_filter}")
    if view.filter_state:
        console.print(f"\n[bold]Filters:[/bold]")
        for column_id, value in view.filter_state.items():
            console.print(f"  • {column_id} = {json.dumps(value, default=str)}")
    if view.sort_state:
        console.print(f"\n[bold]Sort:[/bold] " + ", ".join(f"{e.column_id} {e.direction}" for e in view.sort_state))
    if view.column_order:
        console.print(f"\n[bold]Column Order:[/bold] {', '.join(view.column_order)}")
    if view.hidden_columns:
        console.print(f"[bold]Hidden:[/bold] {', '.join(view.hidden_columns)}")
    if view.pinned_columns:
        pins = ", ".join(f"{c} ({side})" for c, side in view.pinned_columns.items())
        console.print(f"[bold]Pinned:[/bold] {pins}")


@app.command()
def rename_view(
    view_ref: str = typer.Argument(..., help="View id or name"),
    new_name: str = typer.Argument(..., help="New name"),
    store: Optional[Path] = STORE_OPT,
):
    """Rename a saved view."""
    manager = _get_manager(store)
    view = _find_view(manager, view_ref)
    try:
        renamed = manager.rename(view.id, new_name)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Renamed [dim]{view.name}[/dim] to [cyan]{renamed.name}[/cyan]")


@app.command()
def delete_view(
    view_ref: str = typer.Argument(..., help="View id or name"),
    store: Optional[Path] = STORE_OPT,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a saved view."""
    manager = _get_manager(store)
    view = _find_view(manager, view_ref)
    if not yes and not typer.confirm(f"Delete saved view '{view.name}'?"):
        raise typer.Exit(0)
    manager.delete(view.id)
    console.print(f"[green]✓[/green] Deleted view [cyan]{view.name}[/cyan]")


if __name__ == "__main__":
    app()
