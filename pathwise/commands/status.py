"""
Status command for Pathwise.

Displays a document's tree with the progress of every node.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import click

from pathwise.constants import get_percentage_round_precision, get_status_header_width
from pathwise.exceptions import PathwiseError
from pathwise.importer import load_document_file
from pathwise.managers.recompute_engine import RecomputeEngine
from pathwise.models.base import BaseNode, NodeStatus
from pathwise.utils import format_percentage


def _status_indicator(node: BaseNode) -> str:
    if node.status == NodeStatus.COMPLETED:
        return " ✓"
    if node.status == NodeStatus.IN_PROGRESS:
        return " ⏳"
    return ""


def display_tree(node: BaseNode, depth: int, max_depth: Optional[int], precision: int) -> None:
    """Print a node and its children as an indented list."""
    indent = "  " * depth
    click.echo(
        f"{indent}- {node.name} ({format_percentage(node.progress, precision)}){_status_indicator(node)}"
    )
    if max_depth is not None and depth >= max_depth:
        return
    for child in node.children:
        display_tree(child, depth + 1, max_depth, precision)


def get_tree_data(node: BaseNode, depth: int, max_depth: Optional[int], precision: int) -> Dict[str, Any]:
    """Get the tree in a structured format for JSON output."""
    data: Dict[str, Any] = {
        "id": node.id,
        "kind": node.kind,
        "name": node.name,
        "status": node.status.value,
        "progress": node.progress,
        "display": format_percentage(node.progress, precision),
    }
    if not node.is_leaf and (max_depth is None or depth < max_depth):
        data["children"] = [
            get_tree_data(child, depth + 1, max_depth, precision) for child in node.children
        ]
    return data


@click.command(name="status")
@click.argument("document_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-d",
    "--depth",
    type=click.IntRange(min=0),
    default=None,
    help="Only show this many levels below the root.",
)
@click.option(
    "-j",
    "--json",
    "json_output",
    is_flag=True,
    help="Output status in JSON format.",
)
def status(document_file, depth, json_output):
    """Displays a summary of a document's progress."""
    engine = RecomputeEngine(emit_events=False)
    try:
        document = load_document_file(document_file, engine=engine)
    except PathwiseError as e:
        raise click.ClickException(str(e))

    precision = get_percentage_round_precision()
    stats = engine.get_completion_stats(document)

    if json_output:
        result = {
            "document": get_tree_data(document, 0, depth, precision),
            "stats": stats,
        }
        click.echo(json.dumps(result, indent=2))
        return

    header = f"{document.name} Status Summary"
    width = max(get_status_header_width(), len(header))
    click.echo(header)
    click.echo("=" * width)
    click.echo()
    click.echo(
        f"Overall: {format_percentage(document.progress, precision)} ({document.status.value})"
    )
    click.echo(
        f"Items: {stats['completed']} completed, {stats['in_progress']} in progress, "
        f"{stats['not_started']} not started ({stats['total']} total)"
    )
    click.echo()
    display_tree(document, 0, depth, precision)
    click.echo()
    click.echo("=" * width)
