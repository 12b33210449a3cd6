from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer

from facetscope.index.facets import HierarchyNode, build_facet_groups, split_filter_id
from facetscope.index.records import Record, RecordsError, load_records
from facetscope.service.counts import AffectedCounts
from facetscope.service.finder import MatchNavigator
from facetscope.service.predicate import apply_filters

app = typer.Typer(help="FacetScope CLI")


def _load(path: Path) -> List[Record]:
    try:
        return load_records(path)
    except RecordsError as exc:
        raise typer.BadParameter(str(exc), param_hint="RECORDS") from exc


def _log_level(verbose: bool, command: Optional[str]) -> int:
    if verbose:
        return logging.DEBUG
    # Query commands keep stderr quiet; the GUI logs its lifecycle
    return logging.INFO if command == "gui" else logging.WARNING


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    logging.basicConfig(level=_log_level(verbose, ctx.invoked_subcommand), format="[%(levelname)s] %(message)s")


@app.command()
def gui(records: Optional[Path] = typer.Argument(None, help="Records JSON to open.")) -> None:
    """Launch the FacetScope GUI."""
    from facetscope.gui.app import run_gui

    run_gui(records)


@app.command()
def facets(records: Path = typer.Argument(..., help="Records JSON file.")) -> None:
    """Print every facet option with its affected count."""
    recs = _load(records)
    groups = build_facet_groups(recs)
    counts = AffectedCounts(recs)

    def emit_node(key: str, node: HierarchyNode, depth: int) -> None:
        marker = "" if node.is_leaf else "/"
        typer.echo(f"{'  ' * depth}{node.value}{marker} ({counts.count(key, node.value)})")
        for child in node.sorted_children():
            emit_node(key, child, depth + 1)

    for group in groups.values():
        typer.echo(f"[{group.key}] {group.title}")
        if group.is_hierarchical:
            for root in group.sorted_roots():
                emit_node(group.key, root, 1)
        else:
            for value in group.options():
                typer.echo(f"  {value} ({counts.count(group.key, value)})")


@app.command("filter")
def filter_cmd(
    records: Path = typer.Argument(..., help="Records JSON file."),
    query: str = typer.Option("", "--query", "-q", help="Case-insensitive substring of the record name."),
    select: List[str] = typer.Option([], "--select", "-s", help="Facet selection as key:value; repeatable."),
) -> None:
    """Print the paths of records matching the query and selections."""
    recs = _load(records)
    selected: dict[str, list[str]] = {}
    for fid in select:
        key, value = split_filter_id(fid)
        if not value:
            raise typer.BadParameter(f"expected key:value, got {fid!r}", param_hint="--select")
        selected.setdefault(key, []).append(value)
    for rec in apply_filters(recs, selected, query):
        typer.echo(rec.path)


@app.command()
def find(
    records: Path = typer.Argument(..., help="Records JSON file."),
    query: str = typer.Argument(..., help="Text to look for in facet labels."),
) -> None:
    """List facet options whose label contains QUERY, in facet view order."""
    navigator = MatchNavigator(build_facet_groups(_load(records)))
    matches = navigator.search(query)
    if not matches:
        typer.echo("No matches", err=True)
        raise typer.Exit(code=1)
    for idx, match in enumerate(matches, start=1):
        where = match.node_path or match.value
        typer.echo(f"{idx}/{len(matches)} {match.key}: {where}")


if __name__ == "__main__":
    sys.exit(app())
